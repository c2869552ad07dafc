from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class DependentRef:
    """Weak reference to a document whose lifetime is tied to an owner."""

    uuid: str


@dataclass(slots=True)
class DependentList:
    """Documents spawned by the owner that are deleted along with it."""

    refs: list[DependentRef] = field(default_factory=list)
