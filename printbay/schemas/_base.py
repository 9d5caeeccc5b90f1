from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,    # ORM rows validate straight into schemas
        populate_by_name=True,   # accept snake_case as well as camelCase
        alias_generator=to_camel,
    )

    def to_json(self) -> dict:
        """camelCase, JSON-safe dict for response bodies."""
        return self.model_dump(by_alias=True, mode="json")
