# accounts/views.py

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .models import Member
from .serializers import MemberSerializer, UserSerializer


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def me_view(request):
    user = request.user
    data = UserSerializer(user).data
    memberships = Member.objects.none()
    if user.collective_id is not None:
        memberships = Member.objects.filter(member_collective_id=user.collective_id).select_related("collective")
    data["memberships"] = MemberSerializer(memberships, many=True).data
    return Response(data)
