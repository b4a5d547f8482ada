"""
FastAPI backend for the file merger.

Endpoints:
- POST /api/analyze-columns: column mapping proposals from the LLM
- POST /api/merge-files: merge two parsed files with the accepted mappings
- GET  /api/health

Run with: uvicorn backend.api:app --port 8080
"""

import logging
import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from openai import OpenAI
from pydantic import BaseModel

from backend.analyzer import DEFAULT_MODEL, OpenAIMappingOracle
from backend.errors import InputValidationError
from backend.service import analyze_columns_request, merge_files_request

load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Filemerger API",
    version="1.0.0"
)

# Enable CORS for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Pydantic models
# Alle Felder optional, damit fehlende Angaben mit einer eigenen 400-Meldung abgelehnt werden
class FilePayload(BaseModel):
    name: Optional[str] = None
    headers: Optional[List[Any]] = None
    data: Optional[List[Dict[str, Any]]] = None
    rowCount: Optional[int] = None
    sampleData: Optional[List[Dict[str, Any]]] = None


class AnalyzeRequest(BaseModel):
    file1: Optional[FilePayload] = None
    file2: Optional[FilePayload] = None


class MergeRequest(BaseModel):
    file1: Optional[FilePayload] = None
    file2: Optional[FilePayload] = None
    mappings: Any = None


class HealthResponse(BaseModel):
    status: str


def get_oracle():
    """Oracle with the server-side API key. Overridden in tests."""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        return None
    client = OpenAI(api_key=api_key)
    return OpenAIMappingOracle(client, model_name=os.getenv("FILEMERGER_MODEL", DEFAULT_MODEL))


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.post("/api/analyze-columns")
def analyze_columns(request: AnalyzeRequest, oracle=Depends(get_oracle)):
    """Propose column mappings for two files (headers + sample rows)."""
    try:
        return analyze_columns_request(request.model_dump(), oracle)
    except InputValidationError as e:
        return _error(str(e), 400)
    except Exception:
        logger.exception("Error analyzing columns")
        return _error("Failed to analyze columns", 500)


@app.post("/api/merge-files")
def merge_files(request: MergeRequest):
    """Merge two parsed files with the accepted mappings."""
    try:
        return merge_files_request(request.model_dump())
    except InputValidationError as e:
        return _error(str(e), 400)
    except Exception:
        logger.exception("Error merging files")
        return _error("Failed to merge files", 500)
