from pydantic import BaseModel, ConfigDict, Field


class PortRules(BaseModel):
    model_config = ConfigDict(extra="forbid")

    input: int = Field(default=5066, ge=1, le=65535)
    output: int = Field(default=5067, ge=1, le=65535)
    api: int = Field(default=9600, ge=1, le=65535)

class HealthRules(BaseModel):
    model_config = ConfigDict(extra="forbid")

    retries: int = Field(default=10, ge=1)
    delay_seconds: float = Field(default=10.0, ge=0)

class RunnerRules(BaseModel):
    """Settings read from lotus.yaml; every field is optional."""

    model_config = ConfigDict(extra="forbid")

    ports: PortRules = Field(default_factory=PortRules)
    health: HealthRules = Field(default_factory=HealthRules)
    channel_capacity: int = Field(default=32, ge=1)
    event_timeout_seconds: float | None = Field(default=None, gt=0)
    engine_host: str = "127.0.0.1"
    collector_host: str = "0.0.0.0"
    output_host: str = "host.docker.internal"
    image_namespace: str = Field(default="nausicaea", min_length=1)
