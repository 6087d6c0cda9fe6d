# API routes
from labelsheet.api.routes import barcodes, health

__all__ = ["barcodes", "health"]
