# server.py
import uvicorn
from main import app, config
from app.api.v1 import (
    appointment_router,
    directory_router,
    portal_router,
    product_router,
)

# Mount all routers here
app.include_router(appointment_router)
app.include_router(directory_router)
app.include_router(product_router)
app.include_router(portal_router)

if __name__ == "__main__":
    uvicorn.run(
        "server:app",  # Points to the app instance with routers mounted
        host="0.0.0.0",
        port=8080,
        reload=config.environment != "production",
        log_level=config.logging.level_value.lower(),
    )
