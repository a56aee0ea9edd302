from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


Intent = Literal[
    "list",
    "price",
    "warranty",
    "details",
    "clarify",
    "general",
]

Source = Literal[
    "products",
    "clarify",
    "faq",
    "gemini",
    "fallback_error",
]

CONTEXT_VERSION = 1


class ProductRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    brand: str
    name: str
    price: float
    mrp: float
    keywords: Tuple[str, ...] = ()
    specs: Dict[str, str] = Field(default_factory=dict)
    description: Optional[str] = Field(default=None, validation_alias=AliasChoices("description", "desc"))

    @model_validator(mode="before")
    @classmethod
    def _fold_legacy_warranty(cls, data: Any) -> Any:
        # Older catalog rows carry warranty at the top level instead of in specs.
        if isinstance(data, dict) and data.get("warranty"):
            specs = dict(data.get("specs") or {})
            specs.setdefault("warranty", data["warranty"])
            data = {k: v for k, v in data.items() if k != "warranty"}
            data["specs"] = specs
        return data

    @field_validator("specs", mode="before")
    @classmethod
    def _stringify_specs(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(k): str(v) for k, v in value.items() if v is not None}
        return value

    @property
    def display_name(self) -> str:
        if self.name.lower().startswith(self.brand.lower()):
            return self.name
        return f"{self.brand} {self.name}".strip()

    @property
    def warranty(self) -> str:
        return self.specs.get("warranty") or "N/A"


class FAQItem(BaseModel):
    id: str
    keywords: List[str]
    answer: str


class TurnContext(BaseModel):
    """Context a reply hands back to the client, echoed in the next history."""
    model_config = ConfigDict(populate_by_name=True)

    version: int = CONTEXT_VERSION
    last_product_ids: List[str] = Field(default_factory=list, alias="lastProductIds")


class ConversationTurn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    role: Literal["user", "assistant"]
    text: str = Field(default="", validation_alias=AliasChoices("text", "content"))
    context: Optional[TurnContext] = None


class ResolutionResult(BaseModel):
    reply: str
    source: Source
    matched_product_ids: List[str] = Field(default_factory=list)


class ChatRequest(BaseModel):
    message: Optional[str] = None
    history: List[ConversationTurn] = Field(default_factory=list)


class ChatResponse(BaseModel):
    reply: str
    source: Source
    context: Optional[TurnContext] = None
