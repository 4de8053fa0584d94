"""read-only http api serving per-chain json documents

every endpoint takes a required ``chain`` query parameter and returns the
matching file under DATA_DIR unchanged. DATA_DIR is read per request so
tests and deployments can repoint it.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse

from src.category_summary import CATEGORY_SUMMARY_FILE
from src.output_writer import PROPOSALS_FILE, VALIDATORS_FILE, VOTES_FILE, read_json
from src.settings import DATA_DIR

logger = logging.getLogger(__name__)

app = FastAPI(title="Governance Dashboard API", version="1.0.0")

# chain names are directory names; anything else could escape DATA_DIR
_CHAIN_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]*")


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"message": message}, status_code=status_code)


def serve_chain_file(chain: Optional[str], file_name: str, label: str, plural: str) -> JSONResponse:
    """load <DATA_DIR>/<chain>/<file_name> and map failures to status codes"""
    if not chain:
        return _error("Chain parameter is required", 400)
    if not _CHAIN_RE.fullmatch(chain) or ".." in chain:
        return _error("Invalid chain parameter", 400)

    file_path = DATA_DIR / chain / file_name
    try:
        payload = read_json(file_path)
    except FileNotFoundError:
        logger.error(f"File not found for chain {chain} at path: {file_path}")
        return _error(f"{label.capitalize()} data not found for chain: {chain}", 404)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read or parse {label} data for chain {chain}: {e}")
        return _error(f"Error reading or parsing {plural} data", 500)
    return JSONResponse(payload)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/api/votes")
def get_votes(chain: Optional[str] = Query(None)):
    return serve_chain_file(chain, VOTES_FILE, "vote", "votes")


@app.get("/api/proposals")
def get_proposals(chain: Optional[str] = Query(None)):
    return serve_chain_file(chain, PROPOSALS_FILE, "proposal", "proposals")


@app.get("/api/validators")
def get_validators(chain: Optional[str] = Query(None)):
    return serve_chain_file(chain, VALIDATORS_FILE, "validator", "validators")


@app.get("/api/category-summary")
def get_category_summary(chain: Optional[str] = Query(None)):
    return serve_chain_file(chain, CATEGORY_SUMMARY_FILE, "category summary", "category summary")
