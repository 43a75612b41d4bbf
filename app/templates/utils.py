"""Template utilities."""

import os

from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = os.path.dirname(os.path.abspath(__file__))

templates = Jinja2Templates(directory=TEMPLATES_DIR)
