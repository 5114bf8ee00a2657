from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    Represents a single configuration parameter required by a client or vector store.

    Attributes:
        env_key (str): The raw key of the environment variable, without the client/engine prefix.
        val_type (str): The expected type of the value. Supported types are "string", "number" and "bool".
        default (str | int | float | bool | None): Default used when the variable is not set. If None, the variable is required.
    """

    env_key: str
    val_type: str
    default: str | int | float | bool | None = None
