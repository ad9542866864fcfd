from html import escape

from filedrop.transfers.service import Manifest

_NOTICE = """<!DOCTYPE html>
<html>
<head><title>{title}</title></head>
<body style="font-family: Arial; text-align: center; padding: 50px;">
    <h2>{heading}</h2>
    <p>{text}</p>
    <a href="/">Go Back to Home</a>
</body>
</html>
"""

_MANIFEST_CSS = """
        body { font-family: Arial; padding: 40px; background: #f5f5f5; }
        .container { max-width: 600px; margin: 0 auto; background: white; padding: 30px; border-radius: 10px; box-shadow: 0 2px 10px rgba(0,0,0,0.1); }
        .file-item { padding: 15px; border: 1px solid #ddd; margin: 10px 0; border-radius: 5px; }
        .file-item a { text-decoration: none; color: #007bff; font-weight: bold; }
        .file-item:hover { background: #f8f9fa; }
        .size { color: #666; float: right; }
"""

def not_found_page() -> str:
    return _NOTICE.format(
        title="File Not Found",
        heading="File Not Found",
        text="The download link is invalid or has expired.",
    )

def expired_page(retention_days: int) -> str:
    return _NOTICE.format(
        title="Link Expired",
        heading="Download Link Expired",
        text=f"This download link has expired ({retention_days} days limit).",
    )

def manifest_page(manifest: Manifest) -> str:
    # names are user supplied
    items = "".join(
        f'\n        <div class="file-item">'
        f'<a href="{escape(e.download_url)}">{escape(e.display_name)}</a>'
        f'<span class="size">{escape(e.size)}</span></div>'
        for e in manifest.entries
    )
    return f"""<!DOCTYPE html>
<html>
<head>
    <title>Download Files</title>
    <style>{_MANIFEST_CSS}    </style>
</head>
<body>
    <div class="container">
        <h2>Download Your Files</h2>
        <p>Click on the files below to download:</p>{items}
        <br>
        <a href="/">&larr; Share More Files</a>
    </div>
</body>
</html>
"""
