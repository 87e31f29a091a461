"""Prompt shared by the vision-model OCR backends."""

OCR_PROMPT = """\
這張圖片是食品包裝上的標示。
請逐字轉錄圖片中的所有文字，保留原本的換行與標點符號（頓號、逗號、括號等）。
不要翻譯、不要摘要、不要加上任何說明，只輸出轉錄的文字。
若圖片中沒有可辨識的文字，請輸出空白。
"""
