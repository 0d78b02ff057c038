import os
import logging
from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# --- Inference gateway (OpenAI-compatible chat completions) ---
INFERENCE_API_URL = os.getenv("INFERENCE_API_URL", "https://ai.gateway.lovable.dev/v1/chat/completions")
INFERENCE_API_KEY = os.getenv("INFERENCE_API_KEY")
INFERENCE_MODEL = os.getenv("INFERENCE_MODEL", "google/gemini-2.5-flash")
INFERENCE_TIMEOUT = float(os.getenv("INFERENCE_TIMEOUT", "60"))
# Minimum gap between two calls to the provider, in seconds.
INFERENCE_MIN_INTERVAL = float(os.getenv("INFERENCE_MIN_INTERVAL", "0.5"))

# --- Screening ---
BATCH_MAX_WORKERS = int(os.getenv("BATCH_MAX_WORKERS", "4"))
PHONE_DEFAULT_REGION = os.getenv("PHONE_DEFAULT_REGION", "US")


def inference_enabled() -> bool:
    return bool(INFERENCE_API_KEY)
