"""
Services module for the preview service.

Business logic lives here; routers only translate HTTP to service calls.

Available Services:
- PreviewService: Orchestrates retention, processing and publishing
- OriginalFileService: Stores and fetches unprocessed uploads for retry
- StorageService: S3-compatible object storage access
- ImagePreviewBuilder (image_pipeline): Pillow watermarking
- VideoPreviewBuilder (video_pipeline): ffmpeg watermarking with fallbacks

Import from the submodules directly.
"""
