from dataclasses import dataclass

ACTOR = "Actor"
ITEM = "Item"
ACTIVE_EFFECT = "ActiveEffect"


@dataclass(slots=True)
class Document:
    """Identity of a stored document and its place in the embedding tree."""

    id: str
    document_name: str
    uuid: str
    name: str = ""
    parent_entity: int | None = None

    @property
    def is_embedded(self) -> bool:
        return self.parent_entity is not None


def make_uuid(document_name: str, doc_id: str, parent_uuid: str | None = None) -> str:
    if parent_uuid:
        return f"{parent_uuid}.{document_name}.{doc_id}"
    return f"{document_name}.{doc_id}"
