"""ModernGL rendering for the globe.

``GlobeWidget`` lives in ``globe_widget`` and is imported from there so the
camera and shading helpers stay usable without an OpenGL context.
"""
