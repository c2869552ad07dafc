from blinker import Signal
from typing import Dict

class EventBus:
    """Named blinker signals shared by the lifecycle systems."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Strong references keep handlers alive when the owning system is not stored anywhere.
        sig.connect(fn, weak=False)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# CHANGE APPLICATION
# ============================================================================
EVENT_CHANGE_CAST_FAILED = "change_cast_failed"    # payload: key=str, value=Any, reason=str, document=str|None


# ============================================================================
# NOTIFICATIONS
# ============================================================================
EVENT_NOTIFY_WARNING = "notify_warning"            # payload: message=str, reason=str
EVENT_NOTIFY_ERROR = "notify_error"                # payload: message=str, reason=str


# ============================================================================
# EFFECT LIFECYCLE
# ============================================================================
EVENT_EFFECT_CREATED = "effect_created"            # payload: effect_entity=int, parent_entity=int|None, uuid=str
EVENT_EFFECT_DELETED = "effect_deleted"            # payload: effect_entity=int, parent_entity=int|None, uuid=str
EVENT_DEPENDENTS_ADDED = "dependents_added"        # payload: owner_entity=int, uuids=list[str]
EVENT_SUPPRESSION_CHANGED = "suppression_changed"  # payload: effect_entity=int, suppressed=bool


# ============================================================================
# STATUS LEVELS & ENCHANTMENTS
# ============================================================================
EVENT_STATUS_LEVEL_CHANGED = "status_level_changed"    # payload: actor_entity=int, previous=int, level=int
EVENT_ENCHANTMENT_TRACKED = "enchantment_tracked"      # payload: origin=str, uuid=str
EVENT_ENCHANTMENT_UNTRACKED = "enchantment_untracked"  # payload: origin=str, uuid=str
EVENT_STATUS_LEVEL_ADVANCE = "status_level_advance"    # payload: actor_entity=int, delta=int
