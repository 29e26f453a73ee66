import os
from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Remote contract backend
REMOTE_TIMEOUT = float(os.getenv("REMOTE_TIMEOUT", "120"))
EVALUATE_MAX_ATTEMPTS = int(os.getenv("EVALUATE_MAX_ATTEMPTS", "3"))
EVALUATE_RETRY_DELAY = float(os.getenv("EVALUATE_RETRY_DELAY", "1.0"))

# Where upload records are kept: "memory" or "sql"
UPLOAD_STORE = os.getenv("UPLOAD_STORE", "memory")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./contract_sessions.db")

# Streamlit client
RELAY_BASE_URL = os.getenv("RELAY_BASE_URL", "http://127.0.0.1:8000")
SESSION_STORAGE_PATH = os.getenv(
    "SESSION_STORAGE_PATH",
    os.path.join(os.path.expanduser("~"), ".contract_workbench", "session.json"),
)


def get_remote_settings():
    """
    Read the remote backend credentials at call time.
    Returns (username, password, base_url); any of them may be None.
    """
    return (
        os.getenv("LDAP_USERNAME"),
        os.getenv("LDAP_PASSWORD"),
        os.getenv("API_BASE_URL"),
    )
