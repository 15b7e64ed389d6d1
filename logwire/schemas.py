from pydantic import BaseModel, ConfigDict


class LogItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str  # "ERROR", "WARN", "INFO", "DEBUG" or "TRACE"
    module: str
    message: str
