from flask import request
from flask_restx import Namespace, Resource, fields

from petsched.services import get_services
from petsched.utils import api_response, current_user, token_optional

pet_ns = Namespace('pets', description='Pet operations', path='/pets')

pet_model = pet_ns.model('Pet', {
    'name': fields.String(required=True),
    'species': fields.String(required=True),
    'breed': fields.String(),
    'age': fields.Integer(min=0),
    'owner_name': fields.String(required=True),
    'owner_phone': fields.String(),
})


@pet_ns.route('')
class PetList(Resource):
    @pet_ns.doc('list_pets')
    def get(self):
        pets = get_services().pets.list_pets()
        return api_response(pets, count=len(pets))

    @pet_ns.doc('create_pet', security='BearerAuth')
    @pet_ns.expect(pet_model)
    @token_optional
    def post(self):
        """Create a pet; a bearer token, when sent, sets its clinic and user"""
        data = request.get_json(silent=True) or {}
        pet = get_services().pets.create_pet(data, current_user())
        return api_response(pet, 'Pet created successfully', 201)


@pet_ns.route('/<string:pet_id>')
class PetResource(Resource):
    @pet_ns.doc('get_pet')
    def get(self, pet_id):
        return api_response(get_services().pets.get_pet(pet_id))

    @pet_ns.doc('update_pet')
    @pet_ns.expect(pet_model)
    def put(self, pet_id):
        data = request.get_json(silent=True) or {}
        pet = get_services().pets.update_pet(pet_id, data)
        return api_response(pet, 'Pet updated successfully')

    @pet_ns.doc('delete_pet')
    def delete(self, pet_id):
        result = get_services().pets.delete_pet(pet_id)
        return api_response(result, 'Pet deleted successfully')


@pet_ns.route('/<string:pet_id>/photo')
class PetPhoto(Resource):
    @pet_ns.doc('upload_pet_photo', params={'photo': 'Image file (multipart form field)'})
    def post(self, pet_id):
        """Attach a photo to a pet, replacing any previous one"""
        pet = get_services().pets.update_photo(pet_id, request.files.get('photo'))
        return api_response(pet, 'Pet photo updated successfully')
