import logging

from accident_dashboard.config import load_settings
from accident_dashboard.dashboard import create_app

# =========================================================
# 1. SETTINGS & LOGGING
# =========================================================
settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# =========================================================
# 2. DASH APP + ACCIDENTS API
# =========================================================
app = create_app(settings)
server = app.server

# =========================================================
# 3. RUN APP
# =========================================================
if __name__ == "__main__":
    logging.getLogger(__name__).info(
        f"Dashboard on http://{settings.host}:{settings.port}/ , "
        f"API under {settings.api_prefix}"
    )
    app.run(host=settings.host, port=settings.port, debug=settings.debug)
