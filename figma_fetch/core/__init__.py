"""
Core application engine.

The `FetchPipeline` resolves a node URL, asks the Figma API for a render and
saves the resulting image, stopping at the first stage that fails.
"""
