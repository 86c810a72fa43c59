import os
import re

DATA_REPO_URL = "https://github.com/mihika-vuppula/netflix-shiny-app"
RAW_DEFAULT_URL = "https://raw.githubusercontent.com/mihika-vuppula/netflix-shiny-app/refs/heads/main/Netflix_Userbase.csv"

SOURCE_ENV_KEYS = ("CSV_URL", "CSV_PATH", "DATA_URL")
DEFAULT_PAGE_SIZE = 5
GITHUB_BLOB_RX = re.compile(r"https?://github\.com/([^/]+)/([^/]+)/blob/([^/]+)/(.*)")


# ============ URL normalization ============
def normalize_url(path_or_url):
    """Rewrite github.com blob links to raw.githubusercontent.com; anything else passes through stripped."""
    if not isinstance(path_or_url, str):
        return path_or_url
    url = path_or_url.strip()
    m = GITHUB_BLOB_RX.match(url)
    if not m:
        return url
    user, repo, branch, path = m.groups()
    return f"https://raw.githubusercontent.com/{user}/{repo}/{branch}/{path}"


# ============ Source resolution ============
def resolve_source(query_params=None, secrets=None, environ=None) -> str:
    """Pick the CSV source: ?csv= query param, then secrets, then env, then the default URL."""
    environ = os.environ if environ is None else environ
    if query_params:
        q = query_params.get("csv")
        if isinstance(q, list):
            q = q[0] if q else None
        if q:
            return q
    try:
        if secrets and secrets.get("DATA_URL"):
            return secrets["DATA_URL"]
    except FileNotFoundError:
        # streamlit raises this when no secrets.toml exists
        pass
    for k in SOURCE_ENV_KEYS:
        v = environ.get(k)
        if v:
            return v
    return RAW_DEFAULT_URL


def page_size(environ=None) -> int:
    environ = os.environ if environ is None else environ
    raw = environ.get("TABLE_PAGE_SIZE", "")
    try:
        n = int(raw)
    except ValueError:
        return DEFAULT_PAGE_SIZE
    return n if n > 0 else DEFAULT_PAGE_SIZE


def log_level(environ=None) -> str:
    environ = os.environ if environ is None else environ
    return environ.get("LOG_LEVEL", "INFO").upper() or "INFO"
