"""
NSFW gate backed by an ONNX image classification model.

The model scores an image against five classes (drawings, hentai, neutral,
porn, sexy). An image is flagged when any of hentai, porn or sexy scores above
its configured threshold.
"""

import io
import json
import time
from pathlib import Path

import numpy as np
import onnxruntime as ort
from onnxruntime.capi import onnxruntime_pybind11_state as ort_state
import requests
from PIL import Image, UnidentifiedImageError

from .exceptions import ClassificationError, FetchError

GITHUB_API_RELEASES = 'https://api.github.com/repos/Fyko/nsfw/releases/latest'
MODEL_ASSET_NAME = 'model.onnx'

INPUT_SIZE = 224
CLASS_NAMES = ('drawings', 'hentai', 'neutral', 'porn', 'sexy')
FLAGGED_CLASSES = ('hentai', 'porn', 'sexy')


def preprocess(image_bytes):
    """Decode image bytes into a (1, 224, 224, 3) float32 tensor in [0, 1]"""
    with Image.open(io.BytesIO(image_bytes)) as img:
        img = img.convert('RGB').resize((INPUT_SIZE, INPUT_SIZE), Image.Resampling.BILINEAR)
        array = np.asarray(img, dtype=np.float32) / 255.0
    return array[np.newaxis, ...]


def is_flagged(scores, thresholds):
    """Apply per-class thresholds to a {class: score} mapping"""
    return any(scores.get(name, 0.0) > getattr(thresholds, name) for name in FLAGGED_CLASSES)


class NSFWDetector:
    def __init__(self, session, thresholds, fetcher):
        self.session = session
        self.thresholds = thresholds
        self.fetcher = fetcher
        self.input_name = session.get_inputs()[0].name

    @classmethod
    def from_model_file(cls, model_path, thresholds, fetcher):
        session = ort.InferenceSession(str(model_path), providers=['CPUExecutionProvider'])
        return cls(session, thresholds, fetcher)

    def scores(self, image_bytes):
        """Run the model and return {class: score}"""
        tensor = preprocess(image_bytes)
        outputs = self.session.run(None, {self.input_name: tensor})
        values = np.asarray(outputs[0], dtype=np.float32).reshape(-1)
        if values.size != len(CLASS_NAMES):
            raise ValueError(f"model returned {values.size} scores, expected {len(CLASS_NAMES)}")
        return {name: float(value) for name, value in zip(CLASS_NAMES, values)}

    def check(self, image_url):
        """Return True if the image at image_url is classified as explicit"""
        try:
            image_bytes = self.fetcher.get(image_url)
        except FetchError as e:
            raise ClassificationError(image_url, e.reason) from e

        try:
            scores = self.scores(image_bytes)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise ClassificationError(image_url, f"could not decode image: {e}") from e
        except (ValueError, ort_state.Fail, ort_state.InvalidArgument, ort_state.RuntimeException) as e:
            raise ClassificationError(image_url, f"inference failed: {e}") from e

        summary = ', '.join(f"{name}={score:.3f}" for name, score in scores.items())
        print(f"[*] NSFW results for {image_url}: {summary}")

        return is_flagged(scores, self.thresholds)


def metadata_path(model_path):
    model_path = Path(model_path)
    return model_path.with_name(model_path.name + '.json')


def read_model_metadata(model_path):
    path = metadata_path(model_path)
    if not path.exists():
        return {}
    try:
        with open(path, encoding='utf-8') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"[!] Ignoring unreadable model metadata {path}: {e}")
        return {}


def write_model_metadata(model_path, version, url):
    data = {
        'version': version,
        'last_updated': str(int(time.time())),
        'url': url,
    }
    with open(metadata_path(model_path), 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)


def get_latest_release_info(fetcher):
    """Return (version, download_url) of the latest model release on GitHub"""
    print("[*] Checking for latest model version on GitHub...")
    response = fetcher.session.get(GITHUB_API_RELEASES, timeout=fetcher.timeout)
    response.raise_for_status()
    release_info = response.json()

    version = str(release_info.get('tag_name', '')).lstrip('v')
    if not version:
        raise ValueError("Invalid release info: missing tag_name")

    for asset in release_info.get('assets', []):
        if asset.get('name') == MODEL_ASSET_NAME and asset.get('browser_download_url'):
            return version, asset['browser_download_url']

    return version, None


def ensure_model(settings, fetcher, update=False):
    """Make sure the model file exists locally and return its path"""
    model_path = Path(settings.path)
    current = read_model_metadata(model_path).get('version', '0.0.0')

    if model_path.exists() and not update:
        return model_path

    latest_version, download_url = current, None
    try:
        latest_version, download_url = get_latest_release_info(fetcher)
    except (requests.RequestException, ValueError) as e:
        print(f"[!] Could not check GitHub releases: {e}")
    download_url = download_url or settings.url

    if model_path.exists():
        if latest_version == current:
            print(f"[+] NSFW model is up to date (version {current})")
            return model_path
        print(f"[*] NSFW model update available: {current} -> {latest_version}")
    else:
        print(f"[*] NSFW model not found, downloading version {latest_version}...")

    print(f"[*] Downloading model from {download_url}")
    fetcher.download(download_url, model_path, desc="NSFW model")
    write_model_metadata(model_path, latest_version, download_url)
    print(f"[+] Model version {latest_version} downloaded to {model_path}")
    return model_path
