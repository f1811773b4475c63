"""
Block/Task Flow Engine

Pure analysis over a workspace snapshot: which tasks are blocked by an
unfinished prerequisite, which dependency chains ("flows") exist, and which
block-to-block connectors to draw on the canvas.
"""

__version__ = "0.1.0"
