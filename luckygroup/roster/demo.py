"""Sample names used to try the tool without typing a roster."""

DEMO_NAMES = (
    "王小明", "陳美麗", "林志豪", "張雅婷", "李建國",
    "黃怡君", "吳淑芬", "蔡志偉", "楊家豪", "許雅雯",
    "孫悟空", "魯夫", "鳴人", "炭治郎", "阿尼",
    "Iron Man", "Batman", "Spider-Man", "Wonder Woman", "Thor",
)
