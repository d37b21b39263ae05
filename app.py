"""Development entry point: ``python app.py``."""

from src.roster_attendance.roster_attendance.main import create_app

app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=bool(app.config.get("DEBUG", False)))
