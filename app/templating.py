# app/templating.py
from pathlib import Path

from fastapi.templating import Jinja2Templates

from .utils.dates import format_week_range
from .utils.money import format_inr

# absolute path to templates/ so cwd does not matter
BASE_DIR = Path(__file__).resolve().parent.parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["inr"] = format_inr
templates.env.filters["week_range"] = format_week_range
