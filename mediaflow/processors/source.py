"""Source nodes: emit their own static value."""

from mediaflow.graph.node import NodeType
from mediaflow.processors.base import Processor, ProcessorInputs


class TextInputs(ProcessorInputs):
    text: str = ""


class ImageUploadInputs(ProcessorInputs):
    imageUrl: str = ""


class VideoUploadInputs(ProcessorInputs):
    videoUrl: str = ""


class TextProcessor(Processor):
    node_type = NodeType.TEXT
    input_model = TextInputs

    async def run(self, params: TextInputs) -> dict[str, str]:
        return {"output": params.text}


class UploadImageProcessor(Processor):
    node_type = NodeType.UPLOAD_IMAGE
    input_model = ImageUploadInputs

    async def run(self, params: ImageUploadInputs) -> dict[str, str]:
        return {"output": params.imageUrl}


class UploadVideoProcessor(Processor):
    node_type = NodeType.UPLOAD_VIDEO
    input_model = VideoUploadInputs

    async def run(self, params: VideoUploadInputs) -> dict[str, str]:
        return {"output": params.videoUrl}
