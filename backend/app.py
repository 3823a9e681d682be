from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Optional, Dict, Any
import os
import logging
from dotenv import load_dotenv

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from schemas.mind_map_config import MindMapSettings
from services.mind_map_pipeline import MindMapPipeline
from services.radial_layout import LayoutError
from translators.scene_translator import SceneTranslatorError

# Load environment variables
load_dotenv()

# Initialize services
settings = MindMapSettings.from_env()
pipeline = MindMapPipeline(settings)

logger.info(f"Mind map layout seed: {settings.layout.seed}, clearance: {settings.layout.clearance}")

app = FastAPI(
    title="Mind Map Layout Engine",
    version="1.0.0",
)

# Configure CORS - Simplified for local use
allowed_origins = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://localhost:8000",
]

logger.info(f"CORS enabled for origins: {allowed_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)

# Add validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url}: {exc}")
    return JSONResponse(status_code=422, content={"detail": f"Validation error: {exc}"})


# ============================================================================
# MIND MAP ENDPOINTS
# ============================================================================

class MindMapRequest(BaseModel):
    tree: Optional[Any] = None
    text: Optional[str] = None
    seed: Optional[int] = None

@app.get("/health")
async def health():
    return {"status": "ok"}

@app.post("/api/mind-map/scene")
async def generate_scene(request: MindMapRequest) -> Dict[str, Any]:
    """Normalize, lay out and serialize a generated mind map"""
    try:
        if request.tree is not None:
            scene = pipeline.build_scene(request.tree, seed=request.seed)
        elif request.text is not None:
            scene = pipeline.build_scene_from_text(request.text, seed=request.seed)
        else:
            raise ValueError("Either 'tree' or 'text' is required")

        logger.info(f"Scene generated: {len(scene.circles)} nodes, {len(scene.lines)} edges")
        return pipeline.scene_translator.to_dict(scene)

    except (ValueError, LayoutError, SceneTranslatorError) as e:
        logger.warning(f"Invalid mind map request: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error generating mind map scene: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Scene generation failed: {str(e)}")

@app.post("/api/mind-map/outline")
async def generate_outline(request: MindMapRequest) -> Dict[str, str]:
    """Export a generated mind map as a Markdown outline"""
    try:
        if request.tree is not None:
            markdown = pipeline.build_outline(request.tree)
        elif request.text is not None:
            markdown = pipeline.markdown_translator.translate(pipeline.normalizer.normalize_text(request.text))
        else:
            raise ValueError("Either 'tree' or 'text' is required")

        return {"markdown": markdown}

    except ValueError as e:
        logger.warning(f"Invalid outline request: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error generating outline: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Outline generation failed: {str(e)}")


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
