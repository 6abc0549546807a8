from launch import LaunchDescription
from launch_ros.actions import Node
from launch.substitutions import LaunchConfiguration
from launch.actions import DeclareLaunchArgument
from ament_index_python.packages import get_package_share_directory
import os


def generate_launch_description():
    pkg_share = get_package_share_directory('nmea_stream_bridge')

    config_file = os.path.join(
        pkg_share,
        'config',
        'gnss_bridge.yaml'
    )

    return LaunchDescription([

        # --------------------
        # Launch Arguments
        # --------------------
        DeclareLaunchArgument(
            'config',
            default_value=config_file,
            description='Path to GNSS bridge config file'
        ),

        # --------------------
        # GNSS Bridge Node
        # --------------------
        Node(
            package='nmea_stream_bridge',
            executable='gnss_node',
            name='nmea_stream_bridge',
            output='screen',
            parameters=[
                LaunchConfiguration('config')
            ]
        ),
    ])
