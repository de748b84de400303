"""
vbatch - batch video transcoding driven by ffmpeg

This package walks a directory tree and re-encodes every video file it finds:
- Checks that the requested encoder is offered by the local ffmpeg
- Builds one encode job per source file (optionally burning in subtitles)
- Runs ffmpeg for each job while draining and parsing its diagnostics
- Reports live progress and a final per-file summary

Encoding itself is delegated entirely to ffmpeg.
"""

__version__ = "0.1.0"
