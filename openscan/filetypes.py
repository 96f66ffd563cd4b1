"""
Extension-based file type taxonomy.
"""

from dataclasses import dataclass
from enum import Enum
import posixpath


class Category(Enum):
    DIRECTORY = 'directory'
    IMAGE = 'image'
    VIDEO = 'video'
    AUDIO = 'audio'
    DOCUMENT = 'document'
    OTHER = 'other'


@dataclass(frozen=True)
class FileType:
    category: Category
    label: str = ''

    @property
    def is_directory(self):
        return self.category is Category.DIRECTORY

    def describe(self):
        """Display form, e.g. 'Image (PNG)'"""
        if self.is_directory:
            return 'Directory'
        return f"{self.category.value.capitalize()} ({self.label})"


DIRECTORY = FileType(Category.DIRECTORY)

# extension -> (category, display label)
EXTENSION_TABLE = {
    'jpg': (Category.IMAGE, 'JPEG'),
    'jpeg': (Category.IMAGE, 'JPEG'),
    'png': (Category.IMAGE, 'PNG'),
    'gif': (Category.IMAGE, 'GIF'),
    'webp': (Category.IMAGE, 'WebP'),
    'bmp': (Category.IMAGE, 'BMP'),
    'svg': (Category.IMAGE, 'SVG'),
    'tiff': (Category.IMAGE, 'TIFF'),
    'tif': (Category.IMAGE, 'TIFF'),
    'mp4': (Category.VIDEO, 'MP4'),
    'webm': (Category.VIDEO, 'WebM'),
    'avi': (Category.VIDEO, 'AVI'),
    'mov': (Category.VIDEO, 'QuickTime'),
    'mkv': (Category.VIDEO, 'Matroska'),
    'flv': (Category.VIDEO, 'Flash'),
    'wmv': (Category.VIDEO, 'Windows Media'),
    'mp3': (Category.AUDIO, 'MP3'),
    'wav': (Category.AUDIO, 'WAV'),
    'ogg': (Category.AUDIO, 'OGG'),
    'flac': (Category.AUDIO, 'FLAC'),
    'aac': (Category.AUDIO, 'AAC'),
    'pdf': (Category.DOCUMENT, 'PDF'),
    'doc': (Category.DOCUMENT, 'Word'),
    'docx': (Category.DOCUMENT, 'Word'),
    'xls': (Category.DOCUMENT, 'Excel'),
    'xlsx': (Category.DOCUMENT, 'Excel'),
    'ppt': (Category.DOCUMENT, 'PowerPoint'),
    'pptx': (Category.DOCUMENT, 'PowerPoint'),
    'txt': (Category.DOCUMENT, 'Text'),
    'md': (Category.DOCUMENT, 'Markdown'),
}


def get_extension(filename):
    """Lower-cased extension of the last path component, '' if none"""
    return posixpath.splitext(posixpath.basename(filename))[1].lstrip('.').lower()


def classify(filename):
    """Map a file name to its FileType by extension"""
    extension = get_extension(filename)
    if not extension:
        return DIRECTORY

    if extension in EXTENSION_TABLE:
        category, label = EXTENSION_TABLE[extension]
        return FileType(category, label)

    return FileType(Category.OTHER, extension)


def classify_leaf(filename):
    """Classify an entry already known to be a file (never DIRECTORY)"""
    file_type = classify(filename)
    if file_type.is_directory:
        return FileType(Category.OTHER, '')
    return file_type
