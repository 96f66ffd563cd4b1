"""
Aggregated scan statistics and report rendering.

A NodeReport holds the statistics for one listing and everything scanned
beneath it. Leaf files are folded in with add_file(), finished child reports
with merge().
"""

import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .filetypes import Category, FileType
from .sizes import format_bytes

MB = 1_048_576

_CATEGORY_COUNTERS = {
    Category.IMAGE: 'image_count',
    Category.VIDEO: 'video_count',
    Category.AUDIO: 'audio_count',
    Category.DOCUMENT: 'document_count',
    Category.OTHER: 'other_count',
}

_SCALAR_FIELDS = (
    'total_files',
    'total_directories',
    'total_size',
    'image_count',
    'video_count',
    'audio_count',
    'document_count',
    'other_count',
    'explicit_count',
)


@dataclass(frozen=True)
class FileRecord:
    name: str
    url: str
    size: int
    file_type: FileType
    is_explicit: Optional[bool] = None

    @property
    def is_directory(self):
        return self.file_type.is_directory

    def to_dict(self):
        return {
            'name': self.name,
            'url': self.url,
            'size': self.size,
            'type': self.file_type.category.value,
            'format': self.file_type.label,
            'is_explicit': self.is_explicit,
        }


@dataclass
class NodeReport:
    total_files: int = 0
    total_directories: int = 0
    total_size: int = 0
    files_by_type: Dict[str, int] = field(default_factory=dict)
    image_count: int = 0
    video_count: int = 0
    audio_count: int = 0
    document_count: int = 0
    other_count: int = 0
    explicit_count: int = 0
    explicit_urls: List[str] = field(default_factory=list)
    largest_file: Optional[FileRecord] = None
    largest_directory: Optional[Tuple[str, int]] = None
    failures: List[str] = field(default_factory=list)

    def add_file(self, record):
        """Fold one leaf file into this report"""
        if record.is_directory:
            raise ValueError(f"add_file() called with a directory: {record.url}")

        self.total_files += 1
        self.total_size += record.size

        counter = _CATEGORY_COUNTERS[record.file_type.category]
        setattr(self, counter, getattr(self, counter) + 1)

        label = record.file_type.label
        self.files_by_type[label] = self.files_by_type.get(label, 0) + 1

        if self.largest_file is None or self.largest_file.size < record.size:
            self.largest_file = record

        if record.is_explicit:
            self.explicit_count += 1
            self.explicit_urls.append(record.url)

    def add_directory(self):
        """Count one immediate subdirectory"""
        self.total_directories += 1

    def consider_subdirectory(self, url, child):
        """Track the largest immediate subdirectory by its subtree size"""
        if self.largest_directory is None or self.largest_directory[1] < child.total_size:
            self.largest_directory = (url, child.total_size)

    def add_failure(self, error):
        self.failures.append(str(error))

    def check_invariants(self):
        """Return a description of every violated invariant (empty when consistent)"""
        problems = []

        by_type = sum(self.files_by_type.values())
        if by_type != self.total_files:
            problems.append(f"files_by_type sums to {by_type}, total_files is {self.total_files}")

        by_category = sum(getattr(self, name) for name in _CATEGORY_COUNTERS.values())
        if by_category != self.total_files:
            problems.append(f"category counts sum to {by_category}, total_files is {self.total_files}")

        if self.explicit_count != len(self.explicit_urls):
            problems.append(
                f"explicit_count is {self.explicit_count} but {len(self.explicit_urls)} URLs recorded"
            )

        if self.largest_file is not None and self.largest_file.size > self.total_size:
            problems.append("largest_file is larger than total_size")

        return problems

    def to_dict(self):
        largest_directory = None
        if self.largest_directory is not None:
            url, size = self.largest_directory
            largest_directory = {'url': url, 'size': size}

        data = {name: getattr(self, name) for name in _SCALAR_FIELDS}
        data.update({
            'files_by_type': dict(self.files_by_type),
            'explicit_urls': list(self.explicit_urls),
            'largest_file': self.largest_file.to_dict() if self.largest_file else None,
            'largest_directory': largest_directory,
            'failures': list(self.failures),
        })
        return data


def merge(parent, child):
    """Fold a finished child report into a parent report, in place.

    Counters and files_by_type are summed, explicit_urls and failures are
    appended in child order, and largest_file is replaced only when the
    child's is strictly larger. largest_directory is left alone: the parent
    decides that with consider_subdirectory() before merging.
    """
    for name in _SCALAR_FIELDS:
        setattr(parent, name, getattr(parent, name) + getattr(child, name))

    for label, count in child.files_by_type.items():
        parent.files_by_type[label] = parent.files_by_type.get(label, 0) + count

    parent.explicit_urls.extend(child.explicit_urls)
    parent.failures.extend(child.failures)

    if child.largest_file is not None:
        if parent.largest_file is None or parent.largest_file.size < child.largest_file.size:
            parent.largest_file = child.largest_file

    return parent


def _sorted_formats(report):
    # Highest count first, ties by label so output is stable
    return sorted(report.files_by_type.items(), key=lambda x: (-x[1], x[0]))


def _format_label(label):
    return label if label else 'no extension'


def render_text(report, title="SCAN REPORT"):
    """Render the report as a console summary"""
    lines = [
        "=" * 70,
        f"📊 {title}",
        "=" * 70,
        f"📄 Total files: {report.total_files:,}",
        f"📁 Total directories: {report.total_directories:,}",
        f"💾 Total size: {report.total_size:,} bytes ({format_bytes(report.total_size)})",
        "",
        "📋 File type breakdown:",
        f"   Images: {report.image_count} files",
        f"   Videos: {report.video_count} files",
        f"   Audio: {report.audio_count} files",
        f"   Documents: {report.document_count} files",
        f"   Other: {report.other_count} files",
        f"   NSFW content: {report.explicit_count} files",
    ]

    if report.files_by_type:
        lines.append("")
        lines.append("📈 Format distribution:")
        for label, count in _sorted_formats(report):
            lines.append(f"   {_format_label(label)}: {count} files")

    if report.largest_file:
        largest = report.largest_file
        lines.append("")
        lines.append("📏 Largest file:")
        lines.append(f"   Name: {largest.name}")
        lines.append(f"   URL: {largest.url}")
        lines.append(f"   Size: {largest.size:,} bytes ({format_bytes(largest.size)})")
        lines.append(f"   Type: {largest.file_type.describe()}")

    if report.largest_directory:
        url, size = report.largest_directory
        lines.append("")
        lines.append("🗂️  Largest directory:")
        lines.append(f"   Path: {url}")
        lines.append(f"   Size: {size:,} bytes ({format_bytes(size)})")

    if report.explicit_urls:
        lines.append("")
        lines.append("🔞 NSFW files:")
        for url in report.explicit_urls:
            lines.append(f"   {url}")

    if report.failures:
        lines.append("")
        lines.append(f"❌ Failures ({len(report.failures)}):")
        for failure in report.failures:
            lines.append(f"   {failure}")

    lines.append("=" * 70)
    return "\n".join(lines)


def render_markdown(report, include_explicit_urls=True):
    """Render the report as a markdown document"""
    lines = [
        "# Directory Scan Report",
        "",
        "## General Statistics",
        f"- Total files: {report.total_files}",
        f"- Total directories: {report.total_directories}",
        f"- Total size: {report.total_size} bytes ({report.total_size // MB} MB)",
        "",
        "## File Type Breakdown",
        f"- Images: {report.image_count} files",
        f"- Videos: {report.video_count} files",
        f"- Audio: {report.audio_count} files",
        f"- Documents: {report.document_count} files",
        f"- Other: {report.other_count} files",
        f"- NSFW content: {report.explicit_count} files",
        "",
        "## Format Distribution",
    ]
    for label, count in _sorted_formats(report):
        lines.append(f"- {_format_label(label)}: {count} files")

    if report.largest_file:
        largest = report.largest_file
        lines.extend([
            "",
            "## Largest File",
            f"- Name: {largest.name}",
            f"- URL: {largest.url}",
            f"- Size: {largest.size} bytes ({largest.size // MB} MB)",
            f"- Type: {largest.file_type.describe()}",
        ])

    if report.largest_directory:
        url, size = report.largest_directory
        lines.extend([
            "",
            "## Largest Directory",
            f"- Path: {url}",
            f"- Size: {size} bytes ({size // MB} MB)",
        ])

    if include_explicit_urls and report.explicit_urls:
        lines.extend(["", "## NSFW Files"])
        lines.extend(f"- {url}" for url in report.explicit_urls)

    if report.failures:
        lines.extend(["", "## Failures"])
        lines.extend(f"- {failure}" for failure in report.failures)

    return "\n".join(lines) + "\n"


def save_report(report, path, include_explicit_urls=True):
    """Write the report as markdown, or JSON when the path ends in .json"""
    path = str(path)
    if path.lower().endswith('.json'):
        data = report.to_dict()
        if not include_explicit_urls:
            data['explicit_urls'] = []
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
    else:
        with open(path, 'w', encoding='utf-8') as f:
            f.write(render_markdown(report, include_explicit_urls))
