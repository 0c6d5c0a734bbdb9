"""Board (canvas) document models.

A board is a JSON node graph. Text nodes carry a free-form, multi-line
markdown blob that may itself contain task lines.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from oncompletion.core.config import constants
from oncompletion.core.errors import BoardFormatError


class BoardNode(BaseModel):
    """A single node of a board document. Unknown keys (color, file, url, ...) are preserved."""

    model_config = ConfigDict(extra="allow")

    id: str
    type: str = "text"
    x: int | float = 0
    y: int | float = 0
    width: int | float = 250
    height: int | float = 60
    text: str | None = None

    @property
    def is_text(self) -> bool:
        return self.type == "text"


class BoardDocument(BaseModel):
    """Parsed board document."""

    model_config = ConfigDict(extra="allow")

    nodes: list[BoardNode] = Field(default_factory=list)
    edges: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def loads(cls, raw: str) -> "BoardDocument":
        """Parse board JSON.

        Raises:
            BoardFormatError: If the content is not a valid board document
        """
        try:
            data = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as e:
            raise BoardFormatError(f"Invalid Canvas JSON: {e.msg}") from e
        if not isinstance(data, dict):
            raise BoardFormatError("Invalid Canvas JSON: expected an object")
        try:
            return cls.model_validate({"nodes": [], "edges": [], **data})
        except ValidationError as e:
            raise BoardFormatError(f"Invalid Canvas structure: {e.error_count()} error(s)") from e

    def dumps(self) -> str:
        data = self.model_dump(mode="json", exclude_unset=True)
        return json.dumps(data, indent=constants.BOARD_JSON_INDENT, ensure_ascii=False)

    def text_nodes(self) -> list[BoardNode]:
        return [node for node in self.nodes if node.is_text]

    def get_node(self, node_id: str) -> BoardNode | None:
        return next((node for node in self.nodes if node.id == node_id), None)
