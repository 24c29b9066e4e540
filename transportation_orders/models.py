"""
Core data models for the transportation order server.
Uses SQLModel for database ORM.
"""

from sqlmodel import SQLModel, Field


class TransportationOrder(SQLModel, table=True):
    """One pickup-to-delivery shipment assigned to a truck."""
    __tablename__ = "transportation_order"

    truck: str = Field(primary_key=True)
    toid: str = Field(unique=True, index=True)

    # Timestamps are epoch milliseconds
    pickup_time: int
    pickup_lat: float
    pickup_lon: float
    delivery_time: int
    delivery_lat: float
    delivery_lon: float

    # Last reported position and state code, stored as-is
    last_time: int = Field(default=0)
    last_lat: float = Field(default=0.0)
    last_lon: float = Field(default=0.0)
    status: int = Field(default=0)
