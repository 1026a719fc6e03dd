"""
工具模块 - 常量定义
"""

# ==================== 常量定义 ====================
# 二值化
BINARIZE_THRESHOLD = 0.2               # [0,1] 灰度上的固定阈值
OTSU_THRESHOLD = "otsu"                # 使用全局 Otsu 阈值

# 数据集
NUM_IMAGES_TO_ANALYZE = 500            # 默认分析的图像数量
DIGIT_IMAGE_SIZE = 28                  # 合成数字图像边长
IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.bmp', '.tif', '.tiff')

# 区域检测
DEFAULT_CONNECTIVITY = 8               # 前景连通性（4 或 8）
MIN_REGION_AREA = 0                    # 噪声过滤面积，0 表示不过滤

# 记录状态
STATUS_SUCCESS = "Success"
STATUS_NO_REGION = "Failed: No region found"
STATUS_ERROR_TEMPLATE = "Failed: Error {}"

# 批处理
PROGRESS_LOG_INTERVAL = 50             # 每处理多少张图像输出一次进度日志

# 各数字的理论欧拉数：8 有两个孔，0/4/6/9 有一个孔，其余为实心
EXPECTED_EULER_NUMBERS = {
    0: 0, 1: 1, 2: 1, 3: 1, 4: 0,
    5: 1, 6: 0, 7: 1, 8: -1, 9: 0,
}

# 箱线图
EULER_TICKS = [-1, 0, 1]
EULER_TICK_LABELS = ['8', '0, 4, 6, 9', '1, 2, 3, 5, 7']
EULER_NOTE = ("Note: Euler Number measures topology. -1 means two holes (like an 8), "
              "0 means one hole (like a 0), 1 means a solid object (like a 5).")
