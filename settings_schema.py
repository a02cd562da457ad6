from typing import Literal, Optional

from pydantic import BaseModel, ValidationError

class SettingsSchema(BaseModel):
    db_path: str = "training.db"
    regeneration_policy: Literal["allow", "supersede", "reject"] = "allow"
    selection_seed: Optional[int] = None
    log_level: str = "INFO"
    api_base_url: str = "http://localhost:8000"
    api_token: Optional[str] = None

def validate_settings(data: dict) -> None:
    try:
        SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
