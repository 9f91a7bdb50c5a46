# app.py
"""
RxLens - handwritten prescription reader
Main application entry point
"""
import uvicorn
from config.env_config import load_settings

if __name__ == "__main__":
    settings = load_settings()
    host = settings.app_host
    port = settings.app_port
    print("💊 Starting RxLens prescription reader...")
    print(f"🌐 UI:       http://{host}:{port}/")
    print(f"📖 OpenAPI:  http://{host}:{port}/docs")
    print(f"🔍 Health:   http://{host}:{port}/health")
    print(f"🧠 Vision:   {settings.inference_provider} ({settings.model_name})")
    print("\n⚡ Starting server...\n")
    # Use module:app target (prevents double import of app object)
    uvicorn.run(
        "api.main:app",
        host=host,
        port=port,
        reload=settings.debug,
        log_level="info"
    )
