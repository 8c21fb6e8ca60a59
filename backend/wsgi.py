import os

from rentals import create_app
from rentals.config import DevConfig, ProdConfig


def _production() -> bool:
    return (os.getenv("FLASK_ENV") or os.getenv("APP_ENV") or "").lower() == "production"


config = ProdConfig if _production() else DevConfig
app = create_app(config)

if __name__ == "__main__":
    app.run(port=int(os.getenv("PORT", "3000")))
