from fastapi import FastAPI, HTTPException
from fastapi.responses import PlainTextResponse

from anpr_focus.core.config import settings
from anpr_focus.application.plate_focus_service import PlateFocusService


def create_app(service: PlateFocusService) -> FastAPI:
    app = FastAPI(title=settings.app_name)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "env": settings.app_env}

    @app.get("/plates")
    def list_plates():
        snapshot = service.registry.snapshot()
        return {
            "plates": [
                {"text": text, "area": entry.area}
                for text, entry in sorted(snapshot.items())
            ]
        }

    @app.get("/plates/export", response_class=PlainTextResponse)
    def export_plates():
        return service.registry.export_list()

    @app.delete("/plates/{text}")
    def delete_plate(text: str):
        if not service.remove_plate(text):
            raise HTTPException(status_code=404, detail=f"Placa no registrada: {text}")
        return {"removed": text}

    @app.get("/ranking")
    def ranking():
        return {
            "window": [{"text": text, "count": count} for text, count in service.voting.ranking()],
            "confirmed": sorted(service.registry.snapshot()),
        }

    @app.get("/recent")
    def recent():
        return {"recent": service.recent_strings()}

    return app
