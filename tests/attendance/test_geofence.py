import math

from src.workforce_payroll.workforce_payroll.sites.geofence import check_geofence, distance_m


def test_distance_is_zero_for_same_point():
    assert distance_m(19.4326, -99.1332, 19.4326, -99.1332) == 0


def test_one_degree_of_latitude_is_about_111_km():
    assert math.isclose(distance_m(0, 0, 1, 0), 111195, rel_tol=0.001)


def test_missing_coordinates_never_pass():
    inside, dist = check_geofence(None, -99.1, 19.4, -99.1, 500)
    assert not inside
    assert dist == float("inf")
