"""Image service implementations that decide whether a camera image shows a cat."""

import os
import random
from typing import List, Optional, Tuple

import cv2
import numpy as np

from ..config.defaults import MODEL_SETTINGS
from .interfaces import ImageServiceInterface
from ..logging_config import get_logger

logger = get_logger("image_service")


class FakeImageService(ImageServiceInterface):
    """Stand-in image service that answers at random.

    Useful for demos and manual testing without a camera model. Pass a
    seed to make the answers reproducible.
    """

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def image_contains_cat(self, image, confidence_threshold: float) -> bool:
        return self._random.random() < 0.5


class OpenCVImageService(ImageServiceInterface):
    """Cat-face detection with an OpenCV Haar cascade.

    Each cascade hit gets a confidence derived from its size and its
    distance to the image centre; the image contains a cat when any hit
    reaches the requested threshold.
    """

    def __init__(self, cascade_path: Optional[str] = None):
        self.scale_factor = MODEL_SETTINGS["scale_factor"]
        self.min_neighbors = MODEL_SETTINGS["min_neighbors"]
        self.min_detection_size = MODEL_SETTINGS["min_size"]
        self.max_detection_size = MODEL_SETTINGS["max_size"]

        # Preprocessing parameters
        self.blur_kernel_size = 3
        self.contrast_alpha = 1.2
        self.brightness_beta = 10

        self.cascade = self._load_cascade(cascade_path)

    def _load_cascade(self, cascade_path: Optional[str]) -> "cv2.CascadeClassifier":
        """Load the given cascade file, or the first cat-face cascade bundled with OpenCV."""
        if cascade_path:
            candidates = [cascade_path]
        else:
            candidates = [os.path.join(cv2.data.haarcascades, name)
                          for name in MODEL_SETTINGS["cascade_files"]]

        for path in candidates:
            if not os.path.exists(path):
                logger.debug(f"Cascade file not found: {path}")
                continue
            cascade = cv2.CascadeClassifier(path)
            if not cascade.empty():
                logger.info(f"Loaded Haar cascade: {path}")
                return cascade
            logger.warning(f"Failed to load cascade from {path}")

        raise FileNotFoundError(f"No usable Haar cascade among: {', '.join(candidates)}")

    def image_contains_cat(self, image: np.ndarray, confidence_threshold: float) -> bool:
        if image is None or image.size == 0:
            return False

        confidences = self.detect(image)
        best = max(confidences, default=0.0)
        logger.debug(f"{len(confidences)} cascade hits, best confidence {best:.2f}")
        return best >= confidence_threshold

    def detect(self, image: np.ndarray) -> List[float]:
        """Run the cascade and return the confidence of every hit."""
        processed = self._preprocess_image(image)
        hits = self.cascade.detectMultiScale(
            processed,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            minSize=self.min_detection_size,
            maxSize=self.max_detection_size,
            flags=cv2.CASCADE_SCALE_IMAGE
        )
        frame_shape = processed.shape[:2]
        return [self._confidence((int(x), int(y), int(w), int(h)), frame_shape) for x, y, w, h in hits]

    def _preprocess_image(self, image: np.ndarray) -> np.ndarray:
        """Grayscale, blur and equalize the image for the cascade."""
        if image.ndim == 3:
            gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        else:
            gray = image

        if gray.dtype != np.uint8:
            gray = cv2.normalize(gray, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)

        blurred = cv2.GaussianBlur(gray, (self.blur_kernel_size, self.blur_kernel_size), 0)
        enhanced = cv2.convertScaleAbs(blurred, alpha=self.contrast_alpha, beta=self.brightness_beta)
        return cv2.equalizeHist(enhanced)

    def _confidence(self, box: Tuple[int, int, int, int], frame_shape: Tuple[int, int]) -> float:
        """Score a hit: larger hits near the centre of the frame score higher."""
        x, y, w, h = box
        frame_h, frame_w = frame_shape

        center_x = x + w // 2
        center_y = y + h // 2
        center_dist = ((center_x - frame_w // 2) ** 2 + (center_y - frame_h // 2) ** 2) ** 0.5
        max_dist = (frame_w ** 2 + frame_h ** 2) ** 0.5
        center_factor = 1.0 - (center_dist / max_dist)

        max_area = self.max_detection_size[0] * self.max_detection_size[1]
        size_factor = min(1.0, (w * h) / max_area)

        confidence = 0.6 + 0.2 * center_factor + 0.2 * size_factor
        return max(0.0, min(1.0, confidence))


def create_image_service(kind: str, cascade_path: Optional[str] = None,
                         seed: Optional[int] = None) -> ImageServiceInterface:
    """Build the image service named in the configuration."""
    if kind == "fake":
        return FakeImageService(seed)
    if kind == "opencv":
        return OpenCVImageService(cascade_path)
    raise ValueError(f"Unknown image service: {kind}")
