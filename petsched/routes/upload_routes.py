import os

from flask import request, send_from_directory
from flask_restx import Namespace, Resource

from petsched.services import get_services
from petsched.utils import api_response

upload_ns = Namespace('uploads', description='Pet photo storage', path='/')


def file_not_found(filename):
    return {'error': 'File not found', 'message': f'File {filename} does not exist'}, 404


@upload_ns.route('/uploads/<string:filename>')
class ServeUpload(Resource):
    def get(self, filename):
        uploads = get_services().uploads
        path = uploads.get_file_path(filename)
        if not path or not os.path.isfile(path):
            return file_not_found(filename)
        return send_from_directory(uploads.upload_dir, os.path.basename(path))


@upload_ns.route('/upload/pet-photo')
class UploadPetPhoto(Resource):
    @upload_ns.doc(params={'photo': 'Image file (multipart form field)'})
    def post(self):
        stored = get_services().uploads.save(request.files.get('photo'))
        return api_response(stored, 'File uploaded successfully')


@upload_ns.route('/upload/pet-photos')
class UploadPetPhotos(Resource):
    @upload_ns.doc(params={'photos': 'Up to 5 image files (multipart form field)'})
    def post(self):
        stored = get_services().uploads.save_many(request.files.getlist('photos'))
        return api_response(stored, 'Files uploaded successfully')


@upload_ns.route('/upload/<string:filename>')
class UploadedFile(Resource):
    def delete(self, filename):
        if not get_services().uploads.delete_file(filename):
            return file_not_found(filename)
        return api_response(message='File deleted successfully')


@upload_ns.route('/upload/<string:filename>/info')
class UploadedFileInfo(Resource):
    def get(self, filename):
        info = get_services().uploads.get_file_info(filename)
        if info is None:
            return file_not_found(filename)
        return api_response(info)
