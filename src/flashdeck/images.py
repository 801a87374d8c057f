"""Reads image files into embeddable data URLs."""
import base64
import logging
import mimetypes
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def encode_image(image_path: PathLike) -> str:
    """
    Encode an image file as a ``data:`` URL.

    Args:
        image_path: Path to the image file.

    Returns:
        str: A URL of the form ``data:image/png;base64,...``.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file does not look like an image.
    """
    image_path = Path(image_path)
    mime_type, _ = mimetypes.guess_type(image_path.name)
    if not mime_type or not mime_type.startswith("image/"):
        raise ValueError(f"Not an image file: {image_path}")
    with open(image_path, "rb") as image_file:
        base64_image = base64.b64encode(image_file.read()).decode("utf-8")
    return f"data:{mime_type};base64,{base64_image}"


class ImageLoader:
    """Loads images in the background and hands the result to a callback.

    The callback runs only on success; failures are logged and leave the
    caller's previous image untouched. In-flight loads are not cancelled.
    """

    def __init__(self, executor: Optional[ThreadPoolExecutor] = None):
        self.executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="image-loader")

    def load(self, image_path: PathLike, on_loaded: Callable[[str], None]) -> Future:
        """Start reading image_path. The returned future resolves after on_loaded ran."""
        return self.executor.submit(self._read_and_deliver, image_path, on_loaded)

    def _read_and_deliver(self, image_path: PathLike, on_loaded: Callable[[str], None]) -> Optional[str]:
        try:
            data_url = encode_image(image_path)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not load image {image_path}: {str(e)}")
            return None
        on_loaded(data_url)
        logger.debug(f"Loaded image {image_path} ({len(data_url)} characters)")
        return data_url

    def shutdown(self) -> None:
        self.executor.shutdown(wait=True)
