"""Offscreen OpenGL 3.3 core context backed by Qt, for windowless rendering."""

import logging
from pathlib import Path

from PySide6.QtCore import QSize
from PySide6.QtGui import QGuiApplication, QOffscreenSurface, QOpenGLContext, QSurfaceFormat
from PySide6.QtOpenGL import QOpenGLFramebufferObject

logger = logging.getLogger(__name__)


def create_gl_format() -> QSurfaceFormat:
    """OpenGL 3.3 core profile with a depth buffer."""
    fmt = QSurfaceFormat()
    fmt.setVersion(3, 3)
    fmt.setProfile(QSurfaceFormat.OpenGLContextProfile.CoreProfile)
    fmt.setDepthBufferSize(24)
    return fmt


class OffscreenTarget:
    """Context manager making a GL context current on a framebuffer object.

    ::

        with OffscreenTarget(800, 600) as target:
            ...  # GL calls
            target.save("frame.png")
    """

    def __init__(self, width: int, height: int) -> None:
        self.size = (width, height)
        self._app = None
        self._surface = None
        self._context = None
        self._fbo = None

    def __enter__(self) -> "OffscreenTarget":
        self._app = QGuiApplication.instance() or QGuiApplication([])
        fmt = create_gl_format()

        self._surface = QOffscreenSurface()
        self._surface.setFormat(fmt)
        self._surface.create()

        self._context = QOpenGLContext()
        self._context.setFormat(fmt)
        if not self._context.create():
            raise RuntimeError("Could not create an OpenGL 3.3 core context")
        if not self._context.makeCurrent(self._surface):
            raise RuntimeError("Could not make the offscreen GL context current")

        self._fbo = QOpenGLFramebufferObject(
            QSize(*self.size), QOpenGLFramebufferObject.Attachment.Depth,
        )
        self._fbo.bind()
        version = self._context.format().version()
        logger.info("Offscreen GL %d.%d, %dx%d", version[0], version[1], *self.size)
        return self

    def save(self, path: Path) -> None:
        """Write the current framebuffer contents as an image."""
        if not self._fbo.toImage().save(str(path)):
            raise RuntimeError(f"Could not write frame to {path}")
        logger.info("Saved frame to %s", path)

    def __exit__(self, *exc) -> None:
        if self._fbo is not None:
            self._fbo.release()
            self._fbo = None
        if self._context is not None:
            self._context.doneCurrent()
            self._context = None
        if self._surface is not None:
            self._surface.destroy()
            self._surface = None
