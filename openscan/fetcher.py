"""
HTTP access for listing pages, images and model downloads.
"""

import time
import urllib.parse
from pathlib import Path
from urllib.robotparser import RobotFileParser

import requests
import urllib3
from requests.adapters import HTTPAdapter
from tqdm import tqdm
from urllib3.util.retry import Retry

from .exceptions import FetchError

DEFAULT_USER_AGENT = 'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36'


class HttpFetcher:
    def __init__(self, timeout=30, verify_ssl=True, user_agent=None, delay=0.0, session=None):
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.delay = delay

        if not self.verify_ssl:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
            print("[!] WARNING: SSL certificate verification disabled!")

        # Session for connection reuse
        self.session = session if session is not None else requests.Session()
        self.session.verify = self.verify_ssl
        self.session.headers.update({
            'User-Agent': user_agent or DEFAULT_USER_AGENT,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
            'Accept-Encoding': 'gzip, deflate',
            'Connection': 'keep-alive',
        })

        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS"]
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    @property
    def user_agent(self):
        return self.session.headers['User-Agent']

    def get(self, url):
        """Fetch a URL and return the response body"""
        if self.delay:
            time.sleep(self.delay)

        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise FetchError(url, f"HTTP {status}", status=status) from e
        except requests.RequestException as e:
            raise FetchError(url, str(e)) from e

        return response.content

    def robots_allows(self, url):
        """Check robots.txt for crawling permissions"""
        robots_url = urllib.parse.urljoin(url, '/robots.txt')
        try:
            response = self.session.get(robots_url, timeout=self.timeout)
        except requests.RequestException as e:
            print(f"[*] Could not check robots.txt: {e}")
            return True

        if response.status_code != 200:
            return True

        rp = RobotFileParser()
        rp.set_url(robots_url)
        rp.parse(response.text.splitlines())
        return rp.can_fetch(self.user_agent, url)

    def download(self, url, dest, desc=None):
        """Stream a URL to a local file with a progress bar"""
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = dest.with_name(dest.name + '.part')

        try:
            with self.session.get(url, stream=True, timeout=self.timeout * 2) as response:
                response.raise_for_status()
                total_size = int(response.headers.get('content-length', 0))

                with open(tmp_path, 'wb') as f, tqdm(
                    total=total_size or None,
                    desc=desc or dest.name,
                    unit='B',
                    unit_scale=True,
                    leave=True,
                ) as pbar:
                    for chunk in response.iter_content(chunk_size=8192):
                        if chunk:
                            f.write(chunk)
                            pbar.update(len(chunk))
        # RequestException is an OSError subclass, so it has to be caught first
        except requests.RequestException as e:
            tmp_path.unlink(missing_ok=True)
            raise FetchError(url, str(e)) from e
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

        tmp_path.replace(dest)
        return dest
