from contextlib import asynccontextmanager
from time import perf_counter
from typing import Annotated, AsyncGenerator, Awaitable, Callable

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from api.dependencies import get_forest, get_option_indent
from config import DB_FILE
from db.models import Base
from domain.expand_state import ExpandStateTracker
from domain.options import filter_options, flatten_options
from domain.selection import default_type_key, label_for
from domain.taxonomy import Forest, TaxonomyNode, TaxonomyOption, TypeKey
from domain.tree import find_node, search_forest, tree_depth
from services.taxonomy_service import parent_candidates

# Nested responses are serialized recursively by pydantic-core, which gives up at a few hundred levels.
MAX_RESPONSE_DEPTH = 100


class EntryDefaults(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    label: str
    type_key: TypeKey = Field(alias="typeKey")


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI) -> AsyncGenerator[None, None]:
    DB_FILE.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{DB_FILE}")
    Base.metadata.create_all(engine)
    fastapi_app.state.sessionmaker = sessionmaker(engine)
    yield
    engine.dispose()


app = FastAPI(lifespan=lifespan)


@app.middleware("http")
async def print_process_time(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    start_time = perf_counter()
    response = await call_next(request)
    process_time = perf_counter() - start_time
    print(f"Request time: {request.method} {request.url}: {process_time:.4f}s")
    return response


def _nested(forest: Forest) -> Forest:
    depth = tree_depth(forest)
    if depth > MAX_RESPONSE_DEPTH:
        raise HTTPException(
            status_code=422,
            detail=f"Taxonomy is {depth} levels deep; nested responses support at most {MAX_RESPONSE_DEPTH}. "
            "Use /taxonomy/options for a flat listing.",
        )
    return forest


@app.get("/taxonomy/tree", response_model_exclude_none=True)
def get_tree(forest: Annotated[Forest, Depends(get_forest)], search: str = "") -> list[TaxonomyNode]:
    return _nested(search_forest(forest, search))


@app.get("/taxonomy/parent-options", response_model_exclude_none=True)
def get_parent_options(
    forest: Annotated[Forest, Depends(get_forest)],
    exclude_id: int | None = None,
    search: str = "",
) -> list[TaxonomyNode]:
    return _nested(search_forest(parent_candidates(forest, exclude_id), search))


@app.get("/taxonomy/options")
def get_options(
    forest: Annotated[Forest, Depends(get_forest)],
    indent: Annotated[str, Depends(get_option_indent)],
    search: str = "",
) -> list[TaxonomyOption]:
    return filter_options(flatten_options(forest, indent=indent), search)


@app.get("/taxonomy/nodes/{node_id}", response_model_exclude_none=True)
def get_node(node_id: int, forest: Annotated[Forest, Depends(get_forest)]) -> TaxonomyNode:
    node = find_node(forest, node_id)
    if node is None:
        raise HTTPException(status_code=404, detail=f"Taxonomy node {node_id} not found")
    return _nested([node])[0]


@app.get("/taxonomy/nodes/{node_id}/entry-defaults")
def get_entry_defaults(node_id: int, forest: Annotated[Forest, Depends(get_forest)]) -> EntryDefaults:
    """Prefill for a new dictionary entry created under the selected type."""
    if find_node(forest, node_id) is None:
        raise HTTPException(status_code=404, detail=f"Taxonomy node {node_id} not found")
    return EntryDefaults(label=label_for(forest, node_id), type_key=default_type_key(forest, node_id))


@app.get("/taxonomy/expanded")
def get_expanded(forest: Annotated[Forest, Depends(get_forest)], search: str = "") -> list[int]:
    tracker = ExpandStateTracker()
    tracker.expand_all(search_forest(forest, search))
    return sorted(tracker.expanded_ids)
