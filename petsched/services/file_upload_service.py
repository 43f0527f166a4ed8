# Disk-backed storage for pet photos
import logging
import os
import time
import uuid
from datetime import datetime, timezone

from werkzeug.utils import safe_join, secure_filename

from petsched.errors import ValidationError

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 5 * 1024 * 1024
MAX_FILES = 5
ALLOWED_MIME_TYPES = ['image/jpeg', 'image/jpg', 'image/png', 'image/gif', 'image/webp']


class FileUploadService:
    def __init__(self, upload_dir, url_prefix='/api/uploads', max_file_size=MAX_FILE_SIZE, max_files=MAX_FILES):
        self.upload_dir = os.path.abspath(upload_dir)
        self.url_prefix = url_prefix.rstrip('/')
        self.max_file_size = max_file_size
        self.max_files = max_files
        self.ensure_upload_directory()

    def ensure_upload_directory(self):
        os.makedirs(self.upload_dir, exist_ok=True)

    def generate_filename(self, original_name):
        extension = os.path.splitext(secure_filename(original_name or ''))[1].lower()
        return f"{uuid.uuid4()}-{int(time.time() * 1000)}{extension}"

    def get_file_path(self, filename):
        name = secure_filename(filename or '')
        if not name:
            return None
        return safe_join(self.upload_dir, name)

    def get_file_url(self, filename):
        return f"{self.url_prefix}/{filename}"

    @staticmethod
    def _file_size(file):
        stream = file.stream
        stream.seek(0, os.SEEK_END)
        size = stream.tell()
        stream.seek(0)
        return size

    def check_file(self, file):
        """Apply the image-only filter and the size limit to an incoming upload."""
        if file is None or not file.filename:
            raise ValidationError('Please select a file to upload', error='No file uploaded')
        mimetype = file.mimetype or ''
        if not mimetype.startswith('image/'):
            raise ValidationError('Only image files are allowed!', error='Invalid file type')
        if self._file_size(file) > self.max_file_size:
            raise ValidationError(f'File exceeds the {self.max_file_size // (1024 * 1024)}MB limit',
                                  error='File too large')

    def save(self, file):
        self.check_file(file)
        filename = self.generate_filename(file.filename)
        path = os.path.join(self.upload_dir, filename)
        file.save(path)
        self.compress_image(path)
        size = os.path.getsize(path)
        logger.info(f"Stored upload {filename} ({size} bytes)")
        return {
            'filename': filename,
            'originalName': file.filename,
            'size': size,
            'mimetype': file.mimetype,
            'url': self.get_file_url(filename)
        }

    def save_many(self, files):
        files = [f for f in files if f and f.filename]
        if not files:
            raise ValidationError('Please select files to upload', error='No files uploaded')
        if len(files) > self.max_files:
            raise ValidationError(f'At most {self.max_files} files can be uploaded at once',
                                  error='Too many files')
        for file in files:
            self.check_file(file)
        return [self.save(file) for file in files]

    def delete_file(self, filename):
        path = self.get_file_path(filename)
        if path and os.path.isfile(path):
            os.remove(path)
            logger.info(f"Deleted upload {filename}")
            return True
        return False

    def delete_by_url(self, url):
        if not url or not url.startswith(self.url_prefix + '/'):
            return False
        return self.delete_file(url[len(self.url_prefix) + 1:])

    def get_file_info(self, filename):
        path = self.get_file_path(filename)
        if not path or not os.path.isfile(path):
            return None
        stats = os.stat(path)
        return {
            'filename': os.path.basename(path),
            'size': stats.st_size,
            'created': datetime.fromtimestamp(stats.st_ctime, tz=timezone.utc).isoformat(),
            'url': self.get_file_url(os.path.basename(path))
        }

    def validate_file_type(self, file):
        return (file.mimetype or '') in ALLOWED_MIME_TYPES

    def compress_image(self, file_path):
        # Placeholder: images are stored as uploaded
        return file_path
