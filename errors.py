# errors.py
from pydantic import BaseModel


class DataFetchError(Exception):
  """Read-path failure. The message is safe to show; the cause stays in the logs."""


class PersistenceError(BaseModel):
  model_config = {"frozen": True}

  op: str
  message: str
