from pydantic import BaseModel, ConfigDict
from typing import Any, Literal, Optional, Union


class PairedItem(BaseModel):
    item: int


class ItemOutcome(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: Literal["ok", "failed"]
    data: dict[str, Any] = {}
    # success -> PairedItem(item=i), failure -> bare index
    paired_item: Union[PairedItem, int]

    # failure fields
    error: Optional[Exception] = None

    @property
    def error_type(self) -> Optional[str]:
        return type(self.error).__name__ if self.error is not None else None

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "json": self.data,
            "pairedItem": self.paired_item.model_dump() if isinstance(self.paired_item, PairedItem) else self.paired_item,
        }
        if self.error is not None:
            out["error"] = {"type": self.error_type, "message": self.error_message}
        return out
