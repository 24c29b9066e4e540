"""
Pydantic schemas for configuration, settings, and API validation.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import TransportationOrder


class DatabaseConfig(BaseModel):
    """Database configuration."""
    url: str = Field(default="sqlite:///./transportation_orders.db")
    echo: bool = Field(default=False)


class DataConfig(BaseModel):
    """Bulk data configuration."""
    seed_file: Optional[str] = Field(default=None)
    load_on_startup: bool = Field(default=False)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR)$"
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


class ServerConfig(BaseModel):
    """HTTP server binding."""
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535)


class ProjectConfig(BaseModel):
    """Top-level project configuration."""
    name: str = Field(default="Transportation Order Server")
    version: str = Field(default="0.1.0")


class AppConfig(BaseModel):
    """Complete application configuration loaded from params.yaml."""
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


class Settings(BaseSettings):
    """Environment-based settings."""
    model_config = SettingsConfigDict(
        env_prefix="TO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config_path: str = Field(default="config/params.yaml")
    database_url: Optional[str] = Field(default=None)


# API Request/Response Schemas
class TransportationOrderSchema(BaseModel):
    """Wire representation of an order (camelCase JSON)."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    toid: str
    truck: str
    pickup_time: int
    pickup_lat: float
    pickup_lon: float
    delivery_time: int
    delivery_lat: float
    delivery_lon: float
    last_time: int = 0
    last_lat: float = 0.0
    last_lon: float = 0.0
    status: int = 0

    def to_model(self) -> TransportationOrder:
        """Build the table entity from this schema."""
        return TransportationOrder(**self.model_dump())


class ImportStatsResponse(BaseModel):
    """Result of a bulk load."""
    lines_read: int = 0
    orders_saved: int = 0
    orders_deleted: int = 0
    errors: List[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """API health check response."""
    status: str
    version: str
    database_connected: bool
    orders: int
    timestamp: str
