"""Window layer adapters."""

from scenekit.window.rendercanvas_glfw import GlfwWakeupProxy, GlfwWindow, create_glfw_window

__all__ = ["GlfwWakeupProxy", "GlfwWindow", "create_glfw_window"]
