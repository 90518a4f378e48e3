"""
QR Bridge — Services Layer
============================

Service Inventory:
    - codec_base: RecordCodec / MatrixCodec / ImageCodec interfaces and value types
    - JsonRecordCodec: Record ⇄ JSON text (pydantic)
    - QrMatrixCodec: text ⇄ QR symbol (qrcode to encode, zxing-cpp to decode)
    - PillowImageCodec: symbol → PNG bytes, image bytes → grayscale pixels
    - streams: DownloadSink and UploadSource I/O endpoints
    - TranscodingService: orchestrates the generate and read pipelines
"""
