"""Per-vendor request/response translation"""
