"""
PrinSp - screenshot region select, annotate and OCR tool.

This package contains the main application modules:
- core: Flow control, region selection, layout, capture and hotkeys
- ui: Main window and overlay panels
- editor: Annotation model, history, rendering and compositing
- services: Config, logging, clipboard, files, notifications and OCR
"""

__version__ = "0.1.0"
