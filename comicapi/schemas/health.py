from comicapi.schemas.base import CamelModel


class HealthStatus(CamelModel):
    service: str
    environment: str
    database: str
