"""
Sample workflow: Product Marketing Kit.

Branch A crops a product photo and writes a description from two text
prompts. Branch B pulls a frame from the product video. Both branches
converge on a second LLM that writes a short social post from the
description and both images.
"""

from typing import Any


def create_sample_workflow(
    image_url: str = "",
    video_url: str = "",
) -> dict[str, list[dict[str, Any]]]:
    """Return ``{"nodes": [...], "edges": [...]}`` in the editor's JSON shape."""
    nodes: list[dict[str, Any]] = [
        # Branch A
        {
            "id": "upload-image-1",
            "type": "uploadImage",
            "position": {"x": 100, "y": 100},
            "data": {"type": "uploadImage", "label": "Upload Image", "imageUrl": image_url},
        },
        {
            "id": "crop-image-1",
            "type": "cropImage",
            "position": {"x": 100, "y": 300},
            "data": {
                "type": "cropImage",
                "label": "Crop Image",
                "x_percent": 10,
                "y_percent": 10,
                "width_percent": 80,
                "height_percent": 80,
            },
        },
        {
            "id": "text-system-1",
            "type": "text",
            "position": {"x": 100, "y": 500},
            "data": {
                "type": "text",
                "label": "System Prompt",
                "text": (
                    "You are a professional marketing copywriter. "
                    "Generate a compelling one-paragraph product description."
                ),
            },
        },
        {
            "id": "text-product-1",
            "type": "text",
            "position": {"x": 100, "y": 650},
            "data": {
                "type": "text",
                "label": "Product Details",
                "text": (
                    "Product: Wireless Bluetooth Headphones. Features: Noise cancellation, "
                    "30-hour battery, foldable design."
                ),
            },
        },
        {
            "id": "llm-product-1",
            "type": "llm",
            "position": {"x": 100, "y": 800},
            "data": {"type": "llm", "label": "Product Description"},
        },
        # Branch B
        {
            "id": "upload-video-1",
            "type": "uploadVideo",
            "position": {"x": 500, "y": 100},
            "data": {"type": "uploadVideo", "label": "Upload Video", "videoUrl": video_url},
        },
        {
            "id": "extract-frame-1",
            "type": "extractFrame",
            "position": {"x": 500, "y": 300},
            "data": {"type": "extractFrame", "label": "Extract Frame", "timestamp": "50%"},
        },
        # Convergence
        {
            "id": "text-system-2",
            "type": "text",
            "position": {"x": 300, "y": 1000},
            "data": {
                "type": "text",
                "label": "Marketing System Prompt",
                "text": (
                    "You are a social media manager. Create a tweet-length marketing post "
                    "based on the product image and video frame."
                ),
            },
        },
        {
            "id": "llm-final-1",
            "type": "llm",
            "position": {"x": 300, "y": 1150},
            "data": {"type": "llm", "label": "Marketing Summary"},
        },
    ]

    edges = [
        _edge("e1", "upload-image-1", "crop-image-1", "image_url"),
        _edge("e2", "crop-image-1", "llm-product-1", "images"),
        _edge("e3", "text-system-1", "llm-product-1", "systemPrompt"),
        _edge("e4", "text-product-1", "llm-product-1", "userMessage"),
        _edge("e5", "upload-video-1", "extract-frame-1", "video_url"),
        _edge("e6", "text-system-2", "llm-final-1", "systemPrompt"),
        _edge("e7", "llm-product-1", "llm-final-1", "userMessage"),
        _edge("e8", "crop-image-1", "llm-final-1", "images"),
        _edge("e9", "extract-frame-1", "llm-final-1", "images"),
    ]

    return {"nodes": nodes, "edges": edges}


def _edge(edge_id: str, source: str, target: str, target_handle: str) -> dict[str, str]:
    return {
        "id": edge_id,
        "source": source,
        "target": target,
        "sourceHandle": "output",
        "targetHandle": target_handle,
    }
