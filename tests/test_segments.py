import unittest

from chart_tools.analysis.segments import HOUSE_DECAN_TOPICS, segment
from chart_tools.analysis.signs import RULERSHIPS, SIGNS, decan_sign_for_longitude, rulers, triplicity_sign
from chart_tools.charts import compute_house_decans, compute_life_cycle_years
from chart_tools.models import BodyPosition, HouseFrame, PointKind, YearSegment

IRREGULAR_CUSPS = (5.0, 38.0, 64.0, 95.0, 128.0, 160.0, 185.0, 218.0, 244.0, 275.0, 308.0, 340.0)


def _frame(cusps=IRREGULAR_CUSPS) -> HouseFrame:
    return HouseFrame(cusps=tuple(cusps), ascendant=cusps[0], mc=cusps[9], armc=cusps[9], vertex=200.0)


def _body(name: str, longitude: float, house: int | None) -> BodyPosition:
    return BodyPosition(
        name=name,
        kind=PointKind.BODY,
        body_id=None,
        longitude=longitude,
        latitude=0.0,
        distance=1.0,
        speed=1.0,
        house=house,
    )


class SegmentSpanTest(unittest.TestCase):
    def test_segments_tile_each_house(self) -> None:
        frame = _frame()
        for n in (3, 7):
            for house in segment(frame, [], n):
                self.assertEqual(len(house.segments), n)
                self.assertAlmostEqual(sum(s.span for s in house.segments), house.span, places=9)
                self.assertAlmostEqual(house.segments[0].start_longitude, house.cusp_longitude)
                self.assertAlmostEqual(house.segments[-1].end_longitude, frame.cusp(house.house + 1))

    def test_twelfth_house_wraps_through_aries(self) -> None:
        twelfth = segment(_frame(), [], 3)[11]

        self.assertAlmostEqual(twelfth.span, 25.0)
        self.assertAlmostEqual(twelfth.segments[2].end_longitude, 5.0)

    def test_other_segment_counts_rejected(self) -> None:
        with self.assertRaises(ValueError):
            segment(_frame(), [], 5)


class SegmentRulerTest(unittest.TestCase):
    def test_rulers_rotate_through_the_cusp_triplicity(self) -> None:
        first = segment(_frame(), [], 3)[0]  # cusp at 5° Aries

        self.assertEqual([s.ruling_sign for s in first.segments], [0, 4, 8])
        self.assertEqual([s.ruler for s in first.segments], ["Mars", "Sun", "Jupiter"])

        cycle = segment(_frame(), [], 7)[0]
        self.assertEqual([s.ruling_sign for s in cycle.segments], [0, 4, 8, 0, 4, 8, 0])

    def test_water_house_with_modern_rulers(self) -> None:
        cusps = (5.0, 38.0, 64.0, 100.0) + IRREGULAR_CUSPS[4:]
        fourth = segment(_frame(cusps), [], 3, "modern")[3]  # 10° Cancer

        self.assertEqual([SIGNS[s.ruling_sign] for s in fourth.segments], ["Cancer", "Scorpio", "Pisces"])
        self.assertEqual([s.ruler for s in fourth.segments], ["Moon", "Pluto", "Neptune"])

    def test_rulership_tables(self) -> None:
        self.assertEqual(rulers("classical")[11], "Jupiter")
        self.assertEqual(rulers("modern")[11], "Neptune")
        self.assertEqual(rulers()[5], "Chiron")
        self.assertEqual(rulers("classical")[5], "Mercury")
        with self.assertRaises(ValueError):
            rulers("hellenistic")

    def test_rulers_returns_a_copy(self) -> None:
        table = rulers("modern")
        table[11] = "Jupiter"
        table.clear()

        self.assertEqual(len(rulers("modern")), 12)
        self.assertEqual(rulers("modern")[11], "Neptune")
        self.assertEqual(RULERSHIPS["modern"][11], "Neptune")

    def test_triplicity_sign_and_ten_degree_bands(self) -> None:
        self.assertEqual(triplicity_sign(9, 1), 1)  # Capricorn -> Taurus
        self.assertEqual(triplicity_sign(9, 2), 5)  # Capricorn -> Virgo
        self.assertEqual(decan_sign_for_longitude(5.0), 0)
        self.assertEqual(decan_sign_for_longitude(15.0), 4)
        self.assertEqual(decan_sign_for_longitude(25.0), 8)
        self.assertEqual(decan_sign_for_longitude(285.0), 1)  # 15° Capricorn


class SegmentBodiesTest(unittest.TestCase):
    def test_bodies_sorted_within_their_segment(self) -> None:
        bodies = [
            _body("Mars", 30.0, 1),
            _body("Venus", 10.0, 1),
            _body("Mercury", 7.0, 1),
            _body("Jupiter", 40.0, 2),
        ]
        first = compute_house_decans(_frame(), bodies)[0]  # 5° to 38°, 11° per decan

        self.assertEqual([b.name for b in first.segments[0].bodies], ["Mercury", "Venus"])
        self.assertEqual(first.segments[1].bodies, ())
        self.assertEqual([b.name for b in first.segments[2].bodies], ["Mars"])

    def test_body_on_twelfth_house_wrap(self) -> None:
        twelfth = compute_house_decans(_frame(), [_body("Saturn", 2.0, 12)])[11]

        self.assertEqual([b.name for b in twelfth.segments[2].bodies], ["Saturn"])


    def test_bodies_placed_by_offset_without_house(self) -> None:
        bodies = [_body("Uranus", 20.0, None), _body("Neptune", 36.0, None), _body("Pluto", 50.0, None)]
        houses = compute_house_decans(_frame(), bodies)

        self.assertEqual([b.name for b in houses[0].segments[1].bodies], ["Uranus"])
        self.assertEqual([b.name for b in houses[0].segments[2].bodies], ["Neptune"])
        # 38° to 64°: Pluto sits 12° past the second cusp
        self.assertEqual([b.name for b in houses[1].segments[1].bodies], ["Pluto"])

    def test_body_placed_by_longitude_not_by_its_house_tag(self) -> None:
        houses = compute_house_decans(_frame(), [_body("Moon", 100.0, 3)])

        self.assertEqual([b.name for b in houses[3].segments[0].bodies], ["Moon"])
        self.assertEqual(sum(len(s.bodies) for s in houses[2].segments), 0)


class DecanTopicTest(unittest.TestCase):
    def test_decans_carry_house_topics(self) -> None:
        houses = compute_house_decans(_frame(), [])

        self.assertEqual(houses[6].segments[0].topic, "Marriage, spouse")
        self.assertEqual(houses[9].segments[1].topic, "Authority, mother")
        for house in houses:
            self.assertEqual(tuple(s.topic for s in house.segments), HOUSE_DECAN_TOPICS[house.house])

    def test_life_cycle_years_have_no_topic(self) -> None:
        houses = compute_life_cycle_years(_frame(), [], 1990)

        self.assertTrue(all(s.topic == "" for house in houses for s in house.segments))


class LifeCycleTest(unittest.TestCase):
    def test_years_labelled_from_birth(self) -> None:
        houses = compute_life_cycle_years(_frame(), [], 1990)

        second = houses[1]
        self.assertEqual((second.age_start, second.age_end), (7, 13))
        self.assertIsInstance(second.segments[0], YearSegment)
        self.assertEqual((second.segments[0].age, second.segments[0].calendar_year), (7, 1997))

        last = houses[11].segments[-1]
        self.assertEqual((last.age, last.calendar_year), (83, 2073))

    def test_decans_carry_no_age(self) -> None:
        house = compute_house_decans(_frame(), [])[0]

        self.assertIsNone(house.age_start)
        self.assertFalse(any(isinstance(s, YearSegment) for s in house.segments))


if __name__ == "__main__":
    unittest.main()
