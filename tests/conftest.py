import os

# Must be set before the first QApplication is created by pytest-qt
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from pathlib import Path

import pytest

from happinessviz.model import loader
from happinessviz.model.rows import Row

SAMPLE_DATA_DIR = Path(__file__).resolve().parents[1] / "assets" / "data"

REFERENCE_CSV = """Country,Region,Happiness Rank,Happiness Score,Economy (GDP per Capita),Family,Health (Life Expectancy),Freedom,Trust (Government Corruption),Generosity
Finland,Western Europe,6,7.406,1.29025,1.31826,0.88911,0.64169,0.41372,0.23351
Denmark,Western Europe,3,7.527,1.32548,1.36058,0.87464,0.64938,0.48357,0.34139
Togo,Sub-Saharan Africa,158,2.839,0.20868,0.13995,0.28443,0.36453,0.10731,0.16681
"""

YEAR_2019_CSV = """Overall rank,Country or region,Score,GDP per capita,Social support,Healthy life expectancy,Freedom to make life choices,Generosity,Perceptions of corruption
1,Finland,7.769,1.34,1.587,0.986,0.596,0.153,0.393
2,Denmark,7.6,1.383,1.573,0.996,0.592,0.252,0.41
139,Togo,4.085,0.275,0.572,0.41,0.293,0.177,0.085
150,Atlantis,3.5,0.5,0.5,0.5,0.5,0.1,N/A
"""


@pytest.fixture(autouse=True)
def _fresh_region_cache():
    loader.clear_region_cache()
    yield
    loader.clear_region_cache()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """A data directory with a 2015 reference file and a 2019 file without regions."""
    (tmp_path / "2015.csv").write_text(REFERENCE_CSV, encoding="utf-8")
    (tmp_path / "2019.csv").write_text(YEAR_2019_CSV, encoding="utf-8")
    return tmp_path


@pytest.fixture
def sample_rows() -> list[Row]:
    return [
        Row("A", "North", score=1.0, gdp=10.0, social=0.5, life=0.2, freedom=0.1, generosity=0.3, corruption=0.0),
        Row("B", "North", score=2.0, gdp=20.0, social=0.6, life=0.4, freedom=0.2, generosity=0.2, corruption=0.5),
        Row("C", "South", score=3.0, gdp=30.0, social=0.7, life=0.6, freedom=0.3, generosity=0.1, corruption=1.0),
    ]
