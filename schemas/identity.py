from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class IdentityPrefix(StrEnum):
    ETH = "eth"
    CLIENT = "client"


class Identity(BaseModel):
    model_config = ConfigDict(frozen=True)

    private_key: str = Field(repr=False)
    public_key: str
    address: str
    prefix: IdentityPrefix
    name: str

    @computed_field
    @property
    def alias(self) -> str:
        return f"{self.prefix.value}|{self.name}"
