"""Application configuration - single source of truth for all constants.

Contains colors, dimensions, enums (ViewMode, PressTarget), gesture timings,
remote endpoints and environment-driven server settings.
Import from here instead of hardcoding values elsewhere.
"""
import os
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent / ".env")


class ViewMode(Enum):
    """Which Todoist subset a view shows."""
    LABEL = "label"
    PROJECT = "project"
    FILTER = "filter"


class PressTarget:
    """Names of the things a pointer press can land on inside a row."""
    ROW = "row"
    CHECKBOX = "checkbox"
    BUTTON = "button"
    TEXTFIELD = "textfield"
    DROPDOWN = "dropdown"
    OPTION = "option"
    EDITABLE = "editable"


# Presses starting on these never arm a drag
INTERACTIVE_TARGETS = frozenset({
    PressTarget.CHECKBOX,
    PressTarget.BUTTON,
    PressTarget.TEXTFIELD,
    PressTarget.DROPDOWN,
    PressTarget.OPTION,
    PressTarget.EDITABLE,
})

# ============================================================================
# Remote API
# ============================================================================

API_BASE_URL = "https://api.todoist.com/rest/v2"
PROXY_BASE_URL = os.getenv("PROXY_BASE_URL", "") or "http://localhost:5173/api"
TASK_WEB_URL = "https://todoist.com/app/task/{id}"
REQUEST_TIMEOUT_SECONDS = 15
OPEN_EXTERNAL_TIMEOUT_SECONDS = 1.5

# ============================================================================
# Proxy server
# ============================================================================

TODOIST_TOKEN = os.getenv("TODOIST_TOKEN", "")
PORT = int(os.getenv("PORT", "") or 5173)
HTTPS_PORT = int(os.getenv("HTTPS_PORT", "") or 5443)
SSL_CERT_PATH = os.getenv("SSL_CERT_PATH", "")
SSL_KEY_PATH = os.getenv("SSL_KEY_PATH", "")
NO_OPEN = bool(os.getenv("NO_OPEN", ""))
BROWSER = os.getenv("BROWSER", "")

# ============================================================================
# Local storage
# ============================================================================

DB_PATH = Path(os.getenv("TODOISSIMUS_DB", "") or "todoissimus.db")

# ============================================================================
# Reorder gesture
# ============================================================================

ARM_DELAY_MS = 275
MOVE_TOLERANCE_PX = 10
AUTOSCROLL_EDGE_PX = 60
AUTOSCROLL_STEP_PX = 12
FRAME_INTERVAL_S = 1 / 60

# ============================================================================
# Layout
# ============================================================================

ROW_HEIGHT = 72
LIST_HEIGHT = 520
BORDER_RADIUS = 10
BORDER_RADIUS_SM = 5
SNACK_DURATION_MS = 2500
DIALOG_WIDTH_MD = 320
SETTINGS_WIDTH = 360

FONT_SIZE_SM = 10
FONT_SIZE_MD = 12
FONT_SIZE_LG = 14
FONT_SIZE_XL = 16
FONT_SIZE_3XL = 20

ICON_SIZE_3XL = 64

SPACING_LG = 10

PADDING_XL = 12
PADDING_4XL = 40

# API priority 4 is the most urgent; the UI shows it as P1
API_TO_UI_PRIORITY = {4: 1, 3: 2, 2: 3, 1: 4}

PRIORITY_COLORS = {
    1: "#ff6b6b",
    2: "#ff9800",
    3: "#4a9eff",
    4: "#666666",
}

COLORS = {
    "bg": "#1e1e1e",
    "card": "#2d2d2d",
    "card_hover": "#383838",
    "accent": "#4a9eff",
    "input_bg": "#252525",
    "border": "#333",
    "danger": "#ff6b6b",
    "done_text": "#666666",
    "pill": "#3d3d3d",
    "marker": "#4a9eff",
    "white": "white",
    "green": "#4caf50",
}
