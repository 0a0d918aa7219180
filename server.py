import os
import uvicorn

from app.Core.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    port = int(os.environ.get("PORT", 8000))
    host = os.environ.get("HOST", "127.0.0.1" if settings.debug else "0.0.0.0")

    # reload only in debug
    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
        timeout_keep_alive=int(settings.compile_request_deadline_s) + 5,
    )
