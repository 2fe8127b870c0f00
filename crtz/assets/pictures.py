"""
Picture loading and display for `picture` declarations.

A script declares `picture scenes[3] = load("art/scenes");` and later
runs `display(scenes[0]);`. The interpreter only needs the two calls of
PictureLoader; PictureLibrary implements them with pygame.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Protocol

import pygame

logger = logging.getLogger(__name__)


IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".bmp", ".gif")


class PictureLoader(Protocol):
    """What the interpreter needs from an asset loader."""

    def load_folder(self, path: str | Path) -> list[Any]:
        ...

    def display(self, handle: Any) -> bool:
        ...


@dataclass
class Picture:
    """A loaded image."""
    path: Path
    surface: Any
    width: int
    height: int


class PictureLibrary:
    """
    pygame-backed picture store.

    Handles are indices into the library. `display` opens a window sized
    to the image and blocks until it is closed or a key is pressed.
    """

    def __init__(self, title_prefix: str = "CRTZ"):
        self.title_prefix = title_prefix
        self._pictures: list[Optional[Picture]] = []

    def __len__(self) -> int:
        return sum(1 for picture in self._pictures if picture is not None)

    def get(self, handle: int) -> Optional[Picture]:
        if 0 <= handle < len(self._pictures):
            return self._pictures[handle]
        return None

    def load_image(self, path: str | Path) -> int:
        """
        Load one image.

        Returns:
            The picture handle, or -1 if the file could not be loaded
        """
        path = Path(path)
        try:
            surface = pygame.image.load(str(path))
        except (pygame.error, FileNotFoundError) as e:
            logger.error(f"Failed to load picture {path}: {e}")
            return -1

        width, height = surface.get_size()
        self._pictures.append(Picture(path=path, surface=surface, width=width, height=height))
        return len(self._pictures) - 1

    def load_folder(self, path: str | Path) -> list[int]:
        """Load every image directly inside a folder, in filename order."""
        folder = Path(path)
        if not folder.is_dir():
            logger.error(f"Picture folder does not exist: {folder}")
            return []

        files = sorted(
            (entry for entry in folder.iterdir()
             if entry.is_file() and entry.suffix.lower() in IMAGE_EXTENSIONS),
            key=lambda entry: entry.name,
        )

        handles = []
        for file_path in files:
            handle = self.load_image(file_path)
            if handle >= 0:
                handles.append(handle)
        return handles

    def display(self, handle: int | str | Path) -> bool:
        """Show a picture by handle, or load and show a file by path."""
        if isinstance(handle, int):
            return self._show(handle)

        index = self.load_image(handle)
        if index < 0:
            return False
        try:
            return self._show(index)
        finally:
            self.release(index)

    def _show(self, handle: int) -> bool:
        picture = self.get(handle)
        if picture is None:
            logger.error(f"Invalid picture handle: {handle}")
            return False

        try:
            pygame.display.init()
            screen = pygame.display.set_mode((picture.width, picture.height))
            pygame.display.set_caption(f"{self.title_prefix}: {picture.path}")
            screen.blit(picture.surface, (0, 0))
            pygame.display.flip()

            waiting = True
            while waiting:
                for event in pygame.event.get():
                    if event.type in (pygame.QUIT, pygame.KEYDOWN):
                        waiting = False
                pygame.time.wait(16)
        except pygame.error as e:
            logger.error(f"Failed to display picture {picture.path}: {e}")
            return False
        finally:
            pygame.display.quit()

        return True

    def release(self, handle: int) -> None:
        if 0 <= handle < len(self._pictures):
            self._pictures[handle] = None

    def release_all(self) -> None:
        self._pictures.clear()
