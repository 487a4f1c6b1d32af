from pydantic import BaseModel


class BasePydanticModel(BaseModel):
    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
        "validate_assignment": True,
    }
