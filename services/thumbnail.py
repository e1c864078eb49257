"""
Design thumbnail rendering.

The design (shapes masked onto a fabric background) is laid out as a small
HTML page and rasterized by headless Chrome driven through Selenium. The
compositing itself is left entirely to the browser.
"""
import asyncio
import base64
import os
import tempfile
import time
from html import escape
from pathlib import Path
from typing import Optional

from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options as ChromeOptions
from selenium.webdriver.common.by import By
from selenium.webdriver.support.ui import WebDriverWait

from core.config import CHROME_BINARY, THUMBNAIL_HEIGHT, THUMBNAIL_TIMEOUT, THUMBNAIL_WIDTH
from core.errors import UpstreamError
from core.logger import get_logger
from schemas.thumbnail import DesignData, DesignShape

logger = get_logger("thumbnail")

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<title>Design Thumbnail</title>
<style>
  body, html {{ margin: 0; padding: 0; overflow: hidden; }}
  .design-container {{
    width: {width}px;
    height: {height}px;
    position: relative;
    background-image: {background};
    background-size: cover;
    background-position: center;
  }}
  .design-shape {{ position: absolute; overflow: hidden; }}
  .shape-content {{
    width: 100%;
    height: 100%;
    -webkit-mask-size: contain;
    -webkit-mask-position: center;
    -webkit-mask-repeat: no-repeat;
    mask-size: contain;
    mask-position: center;
    mask-repeat: no-repeat;
  }}
</style>
</head>
<body>
<div class="design-container">
{shapes}
</div>
<script>
  var urls = {mask_urls};
  Promise.all(urls.map(function (src) {{
    return new Promise(function (resolve) {{
      var img = new Image();
      img.onload = resolve;
      img.onerror = resolve;
      img.src = src;
    }});
  }})).then(function () {{
    document.body.setAttribute('data-images-loaded', 'true');
  }});
</script>
</body>
</html>
"""

READY_SCRIPT = "return document.body && document.body.getAttribute('data-images-loaded') === 'true';"


def _css_url(url: str) -> str:
    # also valid inside <style>, where HTML entities are not decoded
    quoted = url.replace("\\", "\\\\").replace("'", "\\'").replace("<", "\\3c ")
    return f"url('{quoted}')"


def render_shape(shape: DesignShape) -> str:
    outer = [
        f"left: {shape.x}px",
        f"top: {shape.y}px",
        f"width: {shape.width}px",
        f"height: {shape.height}px",
        f"transform: rotate({shape.rotation}deg)",
    ]
    crop = shape.crop_settings
    if crop is not None:
        outer.append(f"clip-path: inset({crop.top}% {crop.right}% {crop.bottom}% {crop.left}%)")
    mask = _css_url(shape.image)
    inner = [
        f"background-color: {shape.color}",
        f"-webkit-mask-image: {mask}",
        f"mask-image: {mask}",
    ]
    return (
        f'<div class="design-shape" style="{escape("; ".join(outer))}">'
        f'<div class="shape-content" style="{escape("; ".join(inner))}"></div>'
        "</div>"
    )


def build_html(design: DesignData, fabric_image: Optional[str] = None,
               width: int = THUMBNAIL_WIDTH, height: int = THUMBNAIL_HEIGHT) -> str:
    mask_urls = "[{}]".format(", ".join(
        "'{}'".format(s.image.replace("\\", "\\\\").replace("'", "\\'").replace("</", "<\\/"))
        for s in design.body
    ))
    return PAGE_TEMPLATE.format(
        width=width,
        height=height,
        background=_css_url(fabric_image) if fabric_image else "none",
        shapes="\n".join(render_shape(s) for s in design.body),
        mask_urls=mask_urls,
    )


class ThumbnailRenderer:
    def __init__(self, width: int = THUMBNAIL_WIDTH, height: int = THUMBNAIL_HEIGHT,
                 timeout: float = THUMBNAIL_TIMEOUT, chrome_binary: Optional[str] = CHROME_BINARY):
        self.width = width
        self.height = height
        self.timeout = timeout
        self.chrome_binary = chrome_binary

    def _driver(self) -> webdriver.Chrome:
        options = ChromeOptions()
        options.add_argument("--headless=new")
        options.add_argument("--no-sandbox")
        options.add_argument("--disable-dev-shm-usage")
        options.add_argument("--disable-gpu")
        options.add_argument("--allow-file-access-from-files")
        options.add_argument(f"--window-size={self.width},{self.height}")
        if self.chrome_binary:
            options.binary_location = self.chrome_binary
        return webdriver.Chrome(options=options)

    def render(self, design: DesignData, fabric_image: Optional[str] = None) -> bytes:
        """Blocking: returns PNG bytes of the composed design."""
        html = build_html(design, fabric_image, self.width, self.height)
        with tempfile.TemporaryDirectory(prefix="thumb-") as tmp:
            page = os.path.join(tmp, "design.html")
            with open(page, "w", encoding="utf-8") as f:
                f.write(html)

            driver = None
            try:
                driver = self._driver()
                driver.get(Path(page).as_uri())
                WebDriverWait(driver, self.timeout).until(lambda d: d.execute_script(READY_SCRIPT))
                # let the masks paint once loaded
                time.sleep(0.5)
                return driver.find_element(By.CSS_SELECTOR, ".design-container").screenshot_as_png
            except TimeoutException:
                logger.error("Timed out after %ss waiting for design assets", self.timeout)
                raise UpstreamError("Error capturing thumbnail", error="Timed out loading design assets")
            except WebDriverException as e:
                logger.error("Headless browser failed: %s", e.msg)
                raise UpstreamError("Error capturing thumbnail", error=e.msg)
            finally:
                if driver is not None:
                    driver.quit()

    async def capture(self, design: DesignData, fabric_image: Optional[str] = None) -> str:
        png = await asyncio.to_thread(self.render, design, fabric_image)
        return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def get_renderer() -> ThumbnailRenderer:
    return ThumbnailRenderer()
