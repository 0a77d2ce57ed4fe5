"""
Run the Ingredient Snap REST API.

Usage:
    python run_api.py

Environment variables (all optional):
    OPENAI_API_KEY      Primary detector (OpenAI vision) and default recipe LLM
    ROBOFLOW_API_KEY    Secondary detector (Roboflow hosted models)
    ROBOFLOW_ENDPOINTS  Comma-separated model endpoints to try, in order
    LLM_PROVIDER        "openai", "groq", or "ollama" for recipe generation
    GROQ_API_KEY        Required when LLM_PROVIDER=groq
    OLLAMA_BASE_URL     Ollama server URL (default: http://localhost:11434/)
    LOG_LEVEL           Logging level (default: INFO)

Without any key the API still answers, with sample ingredients and a
canned recipe.
"""

import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "adapters.rest.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
