"""
Batch loading and enhancement of image folders.

Each dataset item is one fully processed image, so a DataLoader with worker
processes enhances several images in parallel.
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import cv2
from torch.utils.data import Dataset, DataLoader

from .io import read_image
from .pipeline import run_pipeline

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.tiff', '.tif'}


class ImageFolderDataset(Dataset):
    """Images of a folder, enhanced on access."""

    def __init__(self, image_dir: str, cfg: Optional[Dict[str, Any]] = None,
                 max_size: Optional[int] = None, max_images: Optional[int] = None):
        """
        Initialize dataset.

        Args:
            image_dir: Directory containing images
            cfg: Pipeline configuration
            max_size: Longest side images are shrunk to before processing
            max_images: Only use the first ``max_images`` files
        """
        self.image_dir = Path(image_dir)
        self.cfg = cfg
        self.max_size = max_size

        self.image_paths = self._find_images()
        if max_images:
            self.image_paths = self.image_paths[:max_images]

    def _find_images(self) -> List[Path]:
        """Find all image files in the directory."""
        if not self.image_dir.is_dir():
            raise FileNotFoundError(f"Image directory not found: {self.image_dir}")

        image_paths = [p for p in self.image_dir.iterdir()
                       if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS]

        logger.info("Found %d images in %s", len(image_paths), self.image_dir)
        return sorted(image_paths)

    def __len__(self) -> int:
        return len(self.image_paths)

    def __getitem__(self, idx: int) -> Dict[str, Any]:
        """Load and enhance one image."""
        img_path = self.image_paths[idx]
        image = read_image(img_path)

        h, w = image.shape[:2]
        if self.max_size and max(h, w) > self.max_size:
            scale = self.max_size / max(h, w)
            new_h, new_w = max(1, int(h * scale)), max(1, int(w * scale))
            image = cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_AREA)

        start_time = time.time()
        result = run_pipeline(image, self.cfg)
        processing_time = time.time() - start_time

        return {
            'image_path': str(img_path),
            'original': image,
            'output': result['output'],
            'dark': result['dark'],
            'gamma': result['gamma'],
            'processing_time': processing_time,
        }


def collate_samples(batch: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Keep samples as a list; images in a folder differ in size."""
    return batch


def create_dataloader(image_dir: str, cfg: Optional[Dict[str, Any]] = None,
                      batch_size: int = 1, num_workers: int = 0,
                      max_size: Optional[int] = None,
                      max_images: Optional[int] = None) -> DataLoader:
    """
    Create a data loader that enhances the images of a folder.

    Args:
        image_dir: Directory of input images
        cfg: Pipeline configuration
        batch_size: Samples per batch
        num_workers: Worker processes enhancing images in parallel
        max_size: Longest side images are shrunk to before processing
        max_images: Only use the first ``max_images`` files

    Returns:
        DataLoader yielding lists of enhanced samples in file order
    """
    dataset = ImageFolderDataset(image_dir, cfg, max_size=max_size, max_images=max_images)

    return DataLoader(
        dataset,
        batch_size=batch_size,
        shuffle=False,
        num_workers=num_workers,
        collate_fn=collate_samples,
    )
