from .common_schemas import HealthData, ProvisionRequest, StandardResponse

__all__ = ["HealthData", "ProvisionRequest", "StandardResponse"]
