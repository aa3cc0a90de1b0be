import unittest
from unittest.mock import MagicMock, patch

from core.geometry import LIVE_MARKER, MARKER, GeometryBuilder
from core.models import GeometryType

# Qt se reemplaza con mocks: interesa la lógica de GeometryBuilder, no el dibujo.
mock_qpointf = MagicMock()
mock_qpainterpath = MagicMock()
mock_qpolygonf = MagicMock()
mock_qpen = MagicMock()
mock_qbrush = MagicMock()
mock_qcolor = MagicMock()
mock_qt = MagicMock()


@patch('core.geometry.QPen', new=mock_qpen)
@patch('core.geometry.QBrush', new=mock_qbrush)
@patch('core.geometry.QColor', new=mock_qcolor)
@patch('core.geometry.QPainterPath', new=mock_qpainterpath)
@patch('core.geometry.QPolygonF', new=mock_qpolygonf)
@patch('core.geometry.QPointF', new=mock_qpointf)
@patch('core.geometry.Qt', new=mock_qt)
class TestGeometryBuilder(unittest.TestCase):

    def setUp(self):
        for m in (mock_qpointf, mock_qpainterpath, mock_qpolygonf, mock_qpen,
                  mock_qbrush, mock_qcolor, mock_qt):
            m.reset_mock()
        self.mock_path_instance = MagicMock()
        mock_qpainterpath.return_value = self.mock_path_instance
        self.mock_pen_instance = MagicMock()
        mock_qpen.return_value = self.mock_pen_instance

    def test_route_path_follows_points_in_order(self):
        points = [(10.0, 20.0), (30.0, 40.0), (50.0, 10.0)]
        path = GeometryBuilder.route_path(points)

        self.assertEqual(path, self.mock_path_instance)
        mock_qpointf.assert_any_call(10.0, 20.0)
        self.assertEqual(self.mock_path_instance.lineTo.call_count, 2)
        self.mock_path_instance.lineTo.assert_any_call(mock_qpointf(30.0, 40.0))
        self.mock_path_instance.lineTo.assert_any_call(mock_qpointf(50.0, 10.0))
        self.mock_path_instance.closeSubpath.assert_not_called()

    def test_route_path_single_point(self):
        path = GeometryBuilder.route_path([(1.0, 2.0)])
        self.assertEqual(path, self.mock_path_instance)
        self.mock_path_instance.lineTo.assert_not_called()

    def test_route_path_empty(self):
        self.assertIsNone(GeometryBuilder.route_path([]))
        mock_qpainterpath.assert_not_called()

    def test_polygon_outline_keeps_vertices(self):
        points = [(10.0, 20.0), (30.0, 40.0), (50.0, 10.0)]
        GeometryBuilder.polygon_outline(points)
        # Sin punto de cierre agregado
        self.assertEqual(mock_qpointf.call_count, 3)
        mock_qpolygonf.assert_called_once()
        self.assertEqual(len(mock_qpolygonf.call_args.args[0]), 3)

    def test_pens_are_cosmetic(self):
        GeometryBuilder.pen_for(GeometryType.ROUTE)
        mock_qpen.assert_called_once_with(mock_qt.blue, 3)
        self.mock_pen_instance.setCosmetic.assert_called_once_with(True)

        mock_qpen.reset_mock(); self.mock_pen_instance.reset_mock()
        GeometryBuilder.pen_for(GeometryType.POLYGON)
        mock_qpen.assert_called_once_with(mock_qt.darkGreen, 2)
        self.mock_pen_instance.setStyle.assert_called_once_with(mock_qt.SolidLine)
        self.mock_pen_instance.setCosmetic.assert_called_once_with(True)

    def test_brushes(self):
        GeometryBuilder.brush_for(MARKER)
        mock_qbrush.assert_called_once_with(mock_qt.red)
        mock_qbrush.reset_mock()
        GeometryBuilder.brush_for(LIVE_MARKER)
        mock_qcolor.assert_called_once_with(30, 144, 255)
        mock_qbrush.reset_mock()
        GeometryBuilder.brush_for(GeometryType.ROUTE)
        mock_qbrush.assert_called_once_with(mock_qt.NoBrush)


if __name__ == '__main__':
    unittest.main()
